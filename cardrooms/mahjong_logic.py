"""Wall handling and operation checks for red-dragon mahjong."""

from __future__ import annotations

import random
import threading
from typing import Sequence

from cardrooms.hu import HuLogic
from cardrooms.mahjong_proto import GameType, OperateType
from cardrooms.tiles import Tile

_SUITED = [tile for tile in Tile if tile.suit() < 3]
_SHUFFLE_SWAPS = 300


class MahjongLogic:
    """The wall of one table and the rules applied to it."""

    def __init__(self, game_type: int, qidui: bool) -> None:
        self.game_type = game_type
        self.qidui = qidui
        self._cards: list[int] = []
        self._lock = threading.Lock()
        self._hu = HuLogic()
        self._rng = random.Random()

    def wash_cards(self) -> None:
        """Build a fresh wall and shuffle it."""
        with self._lock:
            cards = [int(t) for _ in range(4) for t in _SUITED]
            zhong = 8 if self.game_type == GameType.HONG_ZHONG8 else 4
            cards.extend([int(Tile.ZHONG)] * zhong)
            size = len(cards)
            for i in range(_SHUFFLE_SWAPS):
                index = i % size
                other = self._rng.randrange(size)
                cards[index], cards[other] = cards[other], cards[index]
            self._cards = cards

    def get_cards(self, num: int) -> list[int]:
        """Take num tiles from the wall; an empty list when too few remain."""
        with self._lock:
            if len(self._cards) < num:
                return []
            taken = self._cards[:num]
            self._cards = self._cards[num:]
            return taken

    def rest_cards_count(self) -> int:
        """Number of tiles left in the wall."""
        return len(self._cards)

    def can_hu(self, cards: Sequence[int], card: int) -> bool:
        """Whether the hand, with card added, wins; red dragons are wild."""
        return self._hu.check_hu(cards, [int(Tile.ZHONG)], card)

    def get_operate_array(self, cards: Sequence[int], card: int) -> list[OperateType]:
        """Operations open to a player holding cards when card is discarded."""
        operations: list[OperateType] = []
        same = sum(1 for c in cards if c == card)
        if same >= 2:
            operations.append(OperateType.PENG)
        if same >= 3:
            operations.append(OperateType.GANG_CHI)
        if self.can_hu(cards, card):
            operations.append(OperateType.HU_CHI)
        if operations:
            operations.append(OperateType.GUO)
        return operations

    def rest_cards(self) -> list[int]:
        """The tiles left in the wall, in drawing order."""
        return list(self._cards)

    def take_card(self, card: int) -> int:
        """Remove one given tile from the wall; 0 when it is not there."""
        with self._lock:
            try:
                self._cards.remove(card)
            except ValueError:
                return 0
            return card