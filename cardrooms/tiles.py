"""Mahjong tile identifiers."""

from __future__ import annotations

from enum import IntEnum


class Tile(IntEnum):
    """A mahjong tile; the tens digit is the suit, the units digit the rank."""

    WAN1 = 1
    WAN2 = 2
    WAN3 = 3
    WAN4 = 4
    WAN5 = 5
    WAN6 = 6
    WAN7 = 7
    WAN8 = 8
    WAN9 = 9
    TONG1 = 11
    TONG2 = 12
    TONG3 = 13
    TONG4 = 14
    TONG5 = 15
    TONG6 = 16
    TONG7 = 17
    TONG8 = 18
    TONG9 = 19
    TIAO1 = 21
    TIAO2 = 22
    TIAO3 = 23
    TIAO4 = 24
    TIAO5 = 25
    TIAO6 = 26
    TIAO7 = 27
    TIAO8 = 28
    TIAO9 = 29
    DONG = 31
    NAN = 32
    XI = 33
    BEI = 34
    ZHONG = 35

    def suit(self) -> int:
        """Suit index: 0 wan, 1 tong, 2 tiao, 3 honours."""
        return self.value // 10

    def rank(self) -> int:
        """Rank within the suit, starting at 1."""
        return self.value % 10