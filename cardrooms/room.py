"""A room: seats, readiness, idle kicks, dismissal votes and the game played in it."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from typing import Any, Iterable

from cardrooms.mahjong_game import MahjongGame
from cardrooms.room_proto import (
    ROOM_PUSH_ROUTER,
    CreatorType,
    DismissPushData,
    GameKind,
    GameRule,
    RoomCreator,
    RoomMessageType,
    RoomUser,
    UserStatus,
    ask_for_dismiss_push,
    other_user_entry_room_push,
    update_user_info_push,
    user_leave_room_push,
    user_ready_push,
)
from cardrooms.sanzhang_game import SanZhangGame
from cardrooms.session import GameFrame, Session, UnionBase

_log = logging.getLogger(__name__)

SERVER_PUSH_ROUTE = "ServerMessagePush"
KICK_DELAY = 30.0
DISMISS_VOTE_TIME = 30
USER_UNION_ID = 1


def _int_field(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    return value


def _bool_field(data: dict[str, Any], key: str) -> bool:
    value = data.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"field {key!r} must be a boolean, got {value!r}")
    return value


@dataclass
class RoomMessageReq:
    """A room-level message sent by a client."""

    type: int = 0
    is_ready: bool = False
    is_exit: bool = False

    @classmethod
    def from_json(cls, raw: str | bytes) -> RoomMessageReq:
        """Parse a client message; raises ValueError on malformed input."""
        doc = json.loads(raw)
        if not isinstance(doc, dict):
            raise ValueError("room message must be a JSON object")
        data = doc.get("data")
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("room message data must be a JSON object")
        return cls(
            type=_int_field(doc, "type"),
            is_ready=_bool_field(data, "isReady"),
            is_exit=_bool_field(data, "isExit"),
        )


class Room:
    """A table that users enter, get ready at, and play one kind of game in."""

    def __init__(self, room_id: str, union_id: int, rule: GameRule, union: UnionBase) -> None:
        self.room_id = room_id
        self.union_id = union_id
        self.rule = rule
        self.room_creator: RoomCreator | None = None
        self.kick_delay = KICK_DELAY
        self._users: dict[str, RoomUser] = {}
        self._union = union
        self._kick_timers: dict[str, threading.Timer] = {}
        self._dismissed = False
        self._game_started = False
        self._ask_dismiss: set[int] = set()
        self._lock = threading.RLock()
        self.game_frame: GameFrame | None = None
        if rule.game_type == GameKind.PIN_SAN_ZHANG:
            self.game_frame = SanZhangGame(rule, self)
        elif rule.game_type == GameKind.HONG_ZHONG:
            self.game_frame = MahjongGame(rule, self)

    # -- state ------------------------------------------------------------

    @property
    def users(self) -> dict[str, RoomUser]:
        """Seated users by uid."""
        return self._users

    @property
    def dismissed(self) -> bool:
        """Whether the room has been dismissed."""
        return self._dismissed

    @property
    def game_started(self) -> bool:
        """Whether a hand is in progress."""
        return self._game_started

    def all_users(self) -> list[str]:
        """Uids of every seated user."""
        return [u.user_info.uid for u in self._users.values()]

    # -- entering ---------------------------------------------------------

    def user_entry_room(self, session: Session, user: Any) -> None:
        """Seat a user, tell them and the others, and start their idle kick timer."""
        self._cancel_kick(session.uid)
        creator_type = CreatorType.USER if self.union_id == USER_UNION_ID else CreatorType.UNION
        self.room_creator = RoomCreator(uid=user.uid, creator_type=creator_type)
        chair = self._empty_chair_id()
        if user.uid not in self._users:
            self._users[user.uid] = RoomUser.from_profile(user, chair)
        self._push([user.uid], update_user_info_push(self.room_id), session)
        session.put("roomId", self.room_id)
        self._push(
            [user.uid],
            {"gameType": self.rule.game_type, "pushRouter": "SelfEntryRoomPush"},
            session,
        )
        self._other_user_entry_push(session, user.uid)
        self._add_kick_schedule(session, user.uid)

    def join_room(self, session: Session, user: Any) -> None:
        """Seat a user in an existing room."""
        self.user_entry_room(session, user)

    def _empty_chair_id(self) -> int:
        taken = {u.chair_id for u in self._users.values()}
        chair = 0
        while chair in taken:
            chair += 1
        return chair

    def _other_user_entry_push(self, session: Session, uid: str) -> None:
        user = self._users.get(uid)
        if user is None:
            return
        others = [u for u in self.all_users() if u != uid]
        self._push(others, other_user_entry_room_push(user), session)

    # -- readiness and hands ----------------------------------------------

    def user_ready(self, uid: str, session: Session) -> None:
        """Mark a user ready and start a hand once everyone needed is ready."""
        user = self._users.get(uid)
        if user is None:
            return
        user.user_status = UserStatus.READY
        self._cancel_kick(uid)
        self._push(self.all_users(), user_ready_push(user.chair_id), session)
        if self.is_start_game():
            self._start_game(session, user)

    def is_start_game(self) -> bool:
        """Whether every seated user is ready and enough of them are seated."""
        ready = sum(1 for u in self._users.values() if u.user_status == UserStatus.READY)
        all_ready = len(self._users) == ready
        if self.rule.game_type == GameKind.HONG_ZHONG:
            if all_ready and ready >= self.rule.max_player_count:
                return True
        return all_ready and ready >= self.rule.min_player_count

    def _start_game(self, session: Session, user: RoomUser) -> None:
        if self._game_started:
            return
        frame = self._require_frame()
        self._game_started = True
        for seated in self._users.values():
            seated.user_status = UserStatus.PLAYING
        frame.start_game(session, user)

    def end_game(self, session: Session) -> None:
        """Mark the current hand over and every user no longer ready."""
        self._game_started = False
        for seated in self._users.values():
            seated.user_status = UserStatus.NONE

    def _require_frame(self) -> GameFrame:
        if self.game_frame is None:
            raise RuntimeError(
                f"room {self.room_id} has no game for game type {self.rule.game_type}"
            )
        return self.game_frame

    # -- messages ---------------------------------------------------------

    def room_message_handle(self, session: Session, req: RoomMessageReq) -> None:
        """Act on a ready, scene-info or dismissal request."""
        if req.type == RoomMessageType.USER_READY_NOTIFY:
            self.user_ready(session.uid, session)
        if req.type == RoomMessageType.GET_ROOM_SCENE_INFO_NOTIFY:
            self._scene_info_push(session)
        if req.type == RoomMessageType.ASK_FOR_DISMISS_NOTIFY:
            self._ask_for_dismiss(session, req.is_exit)

    def game_message_handle(self, session: Session, msg: bytes | str) -> None:
        """Hand a game message from a seated user to the game; others are ignored."""
        user = self._users.get(session.uid)
        if user is None:
            return
        self._require_frame().handle_message(user, session, msg)

    def _scene_info_push(self, session: Session) -> None:
        game_data = self._require_frame().game_data(session)
        to_dict = getattr(game_data, "to_dict", None)
        data = {
            "type": int(RoomMessageType.GET_ROOM_SCENE_INFO_PUSH),
            "pushRouter": ROOM_PUSH_ROUTER,
            "data": {
                "roomID": self.room_id,
                "roomCreatorInfo": None
                if self.room_creator is None
                else self.room_creator.to_dict(),
                "gameRule": self.rule.to_dict(),
                "roomUserInfoArr": [u.to_dict() for u in self._users.values()],
                "gameData": to_dict() if callable(to_dict) else game_data,
            },
        }
        self._push([session.uid], data, session)

    # -- dismissal --------------------------------------------------------

    def _ask_for_dismiss(self, session: Session, agree: bool) -> None:
        with self._lock:
            user = self._users.get(session.uid)
            if user is None:
                _log.warning("room %s: dismissal vote from a user not seated", self.room_id)
                return
            if agree:
                self._ask_dismiss.add(user.chair_id)
            self._push(self.all_users(), ask_for_dismiss_push(self._dismiss_vote(user)), session)
            if agree and len(self._ask_dismiss) == len(self._users):
                for seated in list(self._users.values()):
                    self._kick_user(seated, session)
                if not self._users:
                    self._dismiss_room()

    def _dismiss_vote(self, asker: RoomUser) -> DismissPushData:
        size = max([len(self._users)] + [u.chair_id + 1 for u in self._users.values()])
        names = [""] * size
        chairs: list[Any] = [None] * size
        avatars = [""] * size
        online = [False] * size
        for seated in self._users.values():
            chair = seated.chair_id
            names[chair] = seated.user_info.nickname
            avatars[chair] = seated.user_info.avatar
            if chair in self._ask_dismiss:
                chairs[chair] = True
            online[chair] = True
        return DismissPushData(
            name_arr=names,
            chair_id_arr=chairs,
            avatar_arr=avatars,
            online_arr=online,
            ask_chair_id=asker.chair_id,
            tm=DISMISS_VOTE_TIME,
        )

    def _kick_user(self, user: RoomUser, session: Session) -> None:
        uid = user.user_info.uid
        self._push([uid], update_user_info_push(""), session)
        self._push(self.all_users(), user_leave_room_push(user), session)
        self._users.pop(uid, None)

    def _dismiss_room(self) -> None:
        with self._lock:
            if self._dismissed:
                return
            self._dismissed = True
            for timer in self._kick_timers.values():
                timer.cancel()
            self._kick_timers.clear()
        self._union.dismiss_room(self.room_id)

    # -- kick timers ------------------------------------------------------

    def _cancel_kick(self, uid: str) -> None:
        with self._lock:
            timer = self._kick_timers.pop(uid, None)
        if timer is not None:
            timer.cancel()

    def _add_kick_schedule(self, session: Session, uid: str) -> None:
        with self._lock:
            old = self._kick_timers.pop(uid, None)
            if old is not None:
                old.cancel()
            timer = threading.Timer(self.kick_delay, self._kick_if_idle, args=(uid, session))
            timer.daemon = True
            self._kick_timers[uid] = timer
            timer.start()

    def _kick_if_idle(self, uid: str, session: Session) -> None:
        with self._lock:
            if self._kick_timers.get(uid) is not threading.current_thread():
                return
            del self._kick_timers[uid]
            _log.info("room %s: kicking idle user %s", self.room_id, uid)
            user = self._users.get(uid)
            if user is not None and user.user_status < UserStatus.READY:
                self._kick_user(user, session)
                if not self._users:
                    self._dismiss_room()

    # -- pushing ----------------------------------------------------------

    def _push(self, users: Iterable[str], data: Any, session: Session) -> None:
        session.push(list(users), data, SERVER_PUSH_ROUTE)