"""Deck and hand ranking for three-card poker."""

from __future__ import annotations

import random
import threading
from enum import IntEnum
from typing import Sequence

_SUIT_NAMES = ("diamonds", "clubs", "hearts", "spades")
_DECK = tuple(suit * 0x10 + rank for suit in range(4) for rank in range(1, 14))


class CardsType(IntEnum):
    """Hand categories, weakest first."""

    DAN_ZHANG = 1
    DUI_ZI = 2
    SHUN_ZI = 3
    JIN_HUA = 4
    SHUN_JIN = 5
    BAO_ZI = 6


def card_number(card: int) -> int:
    """Face number of a card, ace being 1."""
    return card & 0x0F


def card_value(card: int) -> int:
    """Ranking value of a card, ace being 14."""
    value = card & 0x0F
    return value + 13 if value == 1 else value


def card_color(card: int) -> str:
    """Suit name of a card, or an empty string for a value outside the deck."""
    if 0x01 <= card <= 0x3D:
        return _SUIT_NAMES[card // 0x10]
    return ""


def card_values(cards: Sequence[int]) -> list[int]:
    """Ranking values of the cards, sorted ascending."""
    return sorted(card_value(c) for c in cards)


def cards_type(cards: Sequence[int]) -> CardsType:
    """Category of a three-card hand."""
    if len(cards) != 3:
        raise ValueError(f"a hand holds 3 cards, got {len(cards)}")
    numbers = {card_number(c) for c in cards}
    if len(numbers) == 1:
        return CardsType.BAO_ZI
    jinhua = len({card_color(c) for c in cards}) == 1
    low, mid, high = card_values(cards)
    shunzi = (low + 1 == mid and mid + 1 == high) or (low, mid, high) == (2, 3, 14)
    if jinhua and shunzi:
        return CardsType.SHUN_JIN
    if jinhua:
        return CardsType.JIN_HUA
    if shunzi:
        return CardsType.SHUN_ZI
    if low == mid or mid == high:
        return CardsType.DUI_ZI
    return CardsType.DAN_ZHANG


def dui_zi(cards: Sequence[int]) -> tuple[int, int]:
    """Pair value and kicker value of a hand holding a pair."""
    values = card_values(cards)
    if values[0] == values[1]:
        return values[0], values[2]
    return values[1], values[0]


def compare_cards(from_cards: Sequence[int], to_cards: Sequence[int]) -> int:
    """Positive when from_cards wins, negative when it loses, 0 on a tie."""
    from_type = cards_type(from_cards)
    to_type = cards_type(to_cards)
    if from_type != to_type:
        return int(from_type) - int(to_type)
    if from_type == CardsType.DUI_ZI:
        pair_from, single_from = dui_zi(from_cards)
        pair_to, single_to = dui_zi(to_cards)
        if pair_from != pair_to:
            return pair_from - pair_to
        return single_from - single_to
    values_from = card_values(from_cards)
    values_to = card_values(to_cards)
    for a, b in zip(reversed(values_from), reversed(values_to)):
        if a != b:
            return a - b
    return 0


class SanZhangLogic:
    """The 52-card deck of one table."""

    def __init__(self) -> None:
        self._cards: list[int] = []
        self._lock = threading.Lock()
        self._rng = random.Random()

    def wash_cards(self) -> None:
        """Build a fresh deck and shuffle it."""
        with self._lock:
            cards = list(_DECK)
            for i in range(len(cards)):
                other = self._rng.randrange(len(cards))
                cards[i], cards[other] = cards[other], cards[i]
            self._cards = cards

    def get_cards(self) -> list[int]:
        """Deal three cards from the top of the deck."""
        with self._lock:
            if len(self._cards) < 3:
                raise ValueError("not enough cards left in the deck")
            hand = [self._cards.pop() for _ in range(3)]
            return hand

    def compare_cards(self, from_cards: Sequence[int], to_cards: Sequence[int]) -> int:
        """Positive when from_cards wins, negative when it loses, 0 on a tie."""
        return compare_cards(from_cards, to_cards)