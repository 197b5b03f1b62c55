"""Winning-hand check for mahjong with wild tiles."""

from __future__ import annotations

from typing import Iterable, Sequence

from cardrooms.hu_table import HuTable, default_table

_SUITS = 4
_RANKS = 9


class HuLogic:
    """Decides whether a hand wins, using a precomputed pattern table."""

    def __init__(self, table: HuTable | None = None) -> None:
        self._table = table if table is not None else default_table()

    def check_hu(
        self, cards: Sequence[int], gui_list: Iterable[int], card: int = 0
    ) -> bool:
        """Whether cards, plus card when it is a real tile and the hand is short, win.

        Tiles in gui_list are wild and may stand for any tile.
        """
        hand = list(cards)
        if 0 < card < 36 and len(hand) < 14:
            hand.append(card)
        return self._is_hu(hand, set(gui_list))

    def _is_hu(self, hand: list[int], gui: set[int]) -> bool:
        counts = [[0] * _RANKS for _ in range(_SUITS)]
        remaining = 0
        for tile in hand:
            if tile in gui:
                remaining += 1
                continue
            suit, rank = divmod(int(tile), 10)
            if not (0 <= suit < _SUITS and 1 <= rank <= _RANKS):
                raise ValueError(f"invalid tile: {tile}")
            counts[suit][rank - 1] += 1

        jiang = False
        for suit, suit_counts in enumerate(counts):
            feng = suit == 3
            total = sum(suit_counts)
            if total == 0:
                continue
            used = 0
            while True:
                if not self._table.find(suit_counts, used, feng):
                    if used < remaining:
                        used += 1
                        continue
                    return False
                if (total + used) % 3 == 2:
                    if not jiang:
                        jiang = True
                    elif used < remaining:
                        used += 1
                        continue
                    else:
                        return False
                remaining -= used
                break

        if not jiang and remaining % 3 == 2:
            return True
        return jiang and remaining % 3 == 0