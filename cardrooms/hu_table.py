"""Lookup tables of winning tile-count patterns for a single suit."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Sequence

_SLOTS = 9
_MAX_GUI = 8
_POWERS = tuple(1 << (3 * i) for i in range(_SLOTS))


def generate_key(counts: Iterable[int]) -> str:
    """Encode per-rank tile counts as a digit string, one digit per rank."""
    digits = []
    for count in counts:
        if not 0 <= count <= 4:
            raise ValueError(f"tile count out of range: {count}")
        digits.append(str(count))
    return "".join(digits)


def _encode(counts: Sequence[int]) -> int:
    if len(counts) != _SLOTS:
        raise ValueError(f"expected {_SLOTS} counts, got {len(counts)}")
    key = 0
    for count, power in zip(counts, _POWERS):
        if not 0 <= count <= 4:
            raise ValueError(f"tile count out of range: {count}")
        key += count * power
    return key


class HuTable:
    """Every count pattern of one suit that splits into melds and at most one pair.

    Patterns are kept separately for numbered suits and for honours (no
    sequences, only the first seven ranks), and for each number of wild
    tiles from 1 to 8 the patterns that become complete with that many wilds.
    """

    def __init__(self) -> None:
        self._plain: dict[bool, frozenset[int]] = {}
        self._with_gui: dict[bool, dict[int, frozenset[int]]] = {}
        for feng in (False, True):
            base = self._generate_plain(feng)
            self._plain[feng] = base
            self._with_gui[feng] = self._generate_gui(base)

    @staticmethod
    def _generate_plain(feng: bool) -> frozenset[int]:
        keys: set[int] = set()
        visited: set[tuple[int, bool]] = set()
        cards = [0] * _SLOTS

        def walk(jiang: bool) -> None:
            state = (_encode(cards), jiang)
            if state in visited:
                return
            visited.add(state)
            total = sum(cards)
            for i in range(_SLOTS):
                if feng and i > 6:
                    continue
                if total <= 11 and cards[i] <= 1:
                    cards[i] += 3
                    keys.add(_encode(cards))
                    walk(jiang)
                    cards[i] -= 3
                if (
                    not feng
                    and total <= 11
                    and i < 7
                    and all(c <= 3 for c in cards[i:i + 3])
                ):
                    for k in range(i, i + 3):
                        cards[k] += 1
                    keys.add(_encode(cards))
                    walk(jiang)
                    for k in range(i, i + 3):
                        cards[k] -= 1
                if not jiang and total <= 12 and cards[i] <= 2:
                    cards[i] += 2
                    keys.add(_encode(cards))
                    walk(True)
                    cards[i] -= 2

        walk(False)
        return frozenset(keys)

    @staticmethod
    def _generate_gui(base: frozenset[int]) -> dict[int, frozenset[int]]:
        levels: dict[int, frozenset[int]] = {}
        previous = base
        for gui_count in range(1, _MAX_GUI + 1):
            current = frozenset(
                key - power
                for key in previous
                for power in _POWERS
                if key & (7 * power)
            )
            levels[gui_count] = current
            previous = current
        return levels

    def find(self, counts: Sequence[int], gui_count: int, feng: bool) -> bool:
        """Whether the counts complete a suit with exactly gui_count wild tiles."""
        key = _encode(counts)
        if gui_count > 0:
            return key in self._with_gui[feng].get(gui_count, frozenset())
        return key in self._plain[feng]


@lru_cache(maxsize=None)
def default_table() -> HuTable:
    """The shared table, built on first use."""
    return HuTable()