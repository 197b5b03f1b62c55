"""Unions hold rooms; the manager hands out room ids and finds rooms."""

from __future__ import annotations

import json
import random
import threading
from dataclasses import dataclass, field
from typing import Any

from cardrooms.room import Room
from cardrooms.room_proto import GameRule
from cardrooms.session import Session

_ROOM_ID_LIMIT = 999999
_ROOM_ID_FLOOR = 100000


class RoomNotExistError(LookupError):
    """No union holds a room with the given id."""

    def __init__(self, room_id: str) -> None:
        super().__init__(f"room {room_id} does not exist")
        self.room_id = room_id


@dataclass
class CreateRoomReq:
    """A request to open a room."""

    union_id: int = 0
    game_rule_id: str = ""
    game_rule: GameRule = field(default_factory=GameRule)

    @classmethod
    def from_json(cls, raw: str | bytes) -> CreateRoomReq:
        """Parse a client request; raises ValueError on malformed input."""
        doc = json.loads(raw)
        if not isinstance(doc, dict):
            raise ValueError("create-room request must be a JSON object")
        union_id = doc.get("unionID", 0)
        if union_id is None:
            union_id = 0
        if isinstance(union_id, bool) or not isinstance(union_id, int):
            raise ValueError(f"field 'unionID' must be an integer, got {union_id!r}")
        rule_id = doc.get("gameRuleID", "")
        if rule_id is None:
            rule_id = ""
        if not isinstance(rule_id, str):
            raise ValueError(f"field 'gameRuleID' must be a string, got {rule_id!r}")
        raw_rule: Any = doc.get("gameRule")
        rule = GameRule() if raw_rule is None else GameRule.from_dict(raw_rule)
        return cls(union_id=union_id, game_rule_id=rule_id, game_rule=rule)


class Union:
    """A group of rooms."""

    def __init__(self, manager: UnionManager) -> None:
        self.id = 0
        self.room_list: dict[str, Room] = {}
        self._manager = manager
        self._lock = threading.RLock()

    def create_room(self, session: Session, req: CreateRoomReq, user: Any) -> Room:
        """Open a room with a fresh id and seat its creator in it."""
        room_id = self._manager.create_room_id()
        room = Room(room_id, req.union_id, req.game_rule, self)
        with self._lock:
            self.room_list[room_id] = room
        room.user_entry_room(session, user)
        return room

    def dismiss_room(self, room_id: str) -> None:
        """Forget a room."""
        with self._lock:
            self.room_list.pop(room_id, None)


class UnionManager:
    """All unions, by id."""

    def __init__(self) -> None:
        self._unions: dict[int, Union] = {}
        self._lock = threading.RLock()
        self._rng = random.Random()

    def get_union(self, union_id: int) -> Union:
        """The union with the id, created on first use."""
        with self._lock:
            union = self._unions.get(union_id)
            if union is None:
                union = Union(self)
                union.id = union_id
                self._unions[union_id] = union
            return union

    def create_room_id(self) -> str:
        """A six-digit room id no union is using."""
        with self._lock:
            while True:
                room_id = self._gen_room_id()
                if all(room_id not in u.room_list for u in self._unions.values()):
                    return room_id

    def _gen_room_id(self) -> str:
        value = self._rng.randrange(_ROOM_ID_LIMIT)
        if value < _ROOM_ID_FLOOR:
            value += _ROOM_ID_FLOOR
        return str(value)

    def room_by_id(self, room_id: str) -> Room | None:
        """The room with the id in any union, or None."""
        with self._lock:
            for union in self._unions.values():
                room = union.room_list.get(room_id)
                if room is not None:
                    return room
        return None

    def join_room(self, session: Session, room_id: str, user: Any) -> None:
        """Seat a user in an existing room; raises RoomNotExistError otherwise."""
        room = self.room_by_id(room_id)
        if room is None:
            raise RoomNotExistError(room_id)
        room.join_room(session, user)