"""Rooms, unions and game rules for Hong Zhong mahjong and three-card poker tables."""

__version__ = "0.1.0"