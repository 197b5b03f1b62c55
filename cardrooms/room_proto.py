"""Room rules, seated users and room-level push payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Mapping

ROOM_PUSH_ROUTER = "RoomMessagePush"


class GameKind(IntEnum):
    """Which card game a room plays."""

    PIN_SAN_ZHANG = 1
    NIU_NIU = 2
    PAO_DE_KUAI = 3
    SAN_GONG = 4
    HONG_ZHONG = 5
    DOU_GONG_NIU = 8


class RoomMessageType(IntEnum):
    """Room-level notifications and pushes."""

    USER_READY_NOTIFY = 301
    USER_READY_PUSH = 401
    USER_LEAVE_ROOM_NOTIFY = 303
    USER_LEAVE_ROOM_RESPONSE = 403
    USER_LEAVE_ROOM_PUSH = 404
    OTHER_USER_ENTRY_ROOM_PUSH = 402
    DISMISS_PUSH = 405
    USER_INFO_CHANGE_PUSH = 406
    USER_CHAT_NOTIFY = 307
    USER_CHAT_PUSH = 407
    USER_OFF_LINE_PUSH = 408
    DRAW_FINISHED_PUSH = 409
    USER_RECONNECT_NOTIFY = 312
    USER_RECONNECT_PUSH = 412
    ASK_FOR_DISMISS_NOTIFY = 313
    ASK_FOR_DISMISS_PUSH = 413
    END_PUSH = 414
    ASK_FOR_DISMISS_STATUS_NOTIFY = 316
    ASK_FOR_DISMISS_STATUS_PUSH = 416
    GET_ROOM_SHOW_USER_INFO_NOTIFY = 317
    GET_ROOM_SHOW_USER_INFO_PUSH = 417
    GET_ROOM_SCENE_INFO_NOTIFY = 318
    GET_ROOM_SCENE_INFO_PUSH = 418
    GET_ROOM_ONLINE_USER_INFO_NOTIFY = 319
    GET_ROOM_ONLINE_USER_INFO_PUSH = 419
    USER_CHANGE_SEAT_NOTIFY = 320
    USER_CHANGE_SEAT_PUSH = 420


class CreatorType(IntEnum):
    """Who opened a room."""

    USER = 1
    UNION = 2


class UserStatus(IntEnum):
    """State of a user seated in a room."""

    NONE = 0
    READY = 1
    PLAYING = 2
    OFFLINE = 4
    DISMISS = 8


_INT_KEYS = {
    "base_score": "baseScore",
    "bureau": "bureau",
    "game_frame_type": "gameFrameType",
    "game_type": "gameType",
    "ma": "ma",
    "max_player_count": "maxPlayerCount",
    "min_player_count": "minPlayerCount",
    "pay_diamond": "payDiamond",
    "pay_type": "payType",
    "room_type": "roomType",
    "trust_tm": "trustTm",
    "max_score": "maxScore",
    "round_type": "roundType",
}

_BOOL_KEYS = {
    "can_enter": "canEnter",
    "can_trust": "canTrust",
    "chunniunai": "chunniunai",
    "can_watch": "canWatch",
    "cuopai": "cuopai",
    "qidui": "qidui",
    "yuyin": "yuyin",
    "fangzuobi": "fangzuobi",
}


def _check_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    return value


@dataclass
class GameRule:
    """Settings a room is created with."""

    add_scores: list[int] = field(default_factory=list)
    base_score: int = 0
    bureau: int = 0
    can_enter: bool = False
    can_trust: bool = False
    chunniunai: bool = False
    can_watch: bool = False
    cuopai: bool = False
    game_frame_type: int = 0
    game_type: int = 0
    ma: int = 0
    max_player_count: int = 0
    min_player_count: int = 0
    pay_diamond: int = 0
    pay_type: int = 0
    qidui: bool = False
    room_type: int = 0
    yuyin: bool = False
    trust_tm: int = 0
    fangzuobi: bool = False
    max_score: int = 0
    round_type: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GameRule:
        """Build a rule from its wire form; unknown keys are ignored."""
        if not isinstance(data, Mapping):
            raise ValueError("game rule must be a JSON object")
        values: dict[str, Any] = {}
        for attr, key in _INT_KEYS.items():
            raw = data.get(key)
            if raw is not None:
                values[attr] = _check_int(raw, key)
        for attr, key in _BOOL_KEYS.items():
            raw = data.get(key)
            if raw is not None:
                if not isinstance(raw, bool):
                    raise ValueError(f"field {key!r} must be a boolean, got {raw!r}")
                values[attr] = raw
        scores = data.get("addScores")
        if scores is not None:
            if not isinstance(scores, list):
                raise ValueError("field 'addScores' must be a list")
            values["add_scores"] = [_check_int(s, "addScores") for s in scores]
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """The wire form of the rule."""
        wire: dict[str, Any] = {"addScores": list(self.add_scores)}
        for attr, key in _INT_KEYS.items():
            wire[key] = getattr(self, attr)
        for attr, key in _BOOL_KEYS.items():
            wire[key] = getattr(self, attr)
        return wire


@dataclass
class RoomCreator:
    """The user who opened a room, and in what capacity."""

    uid: str
    creator_type: CreatorType = CreatorType.USER

    def to_dict(self) -> dict[str, Any]:
        """The wire form of the creator."""
        return {"uid": self.uid, "creatorType": int(self.creator_type)}


@dataclass
class UserInfo:
    """Profile data shown for a seated user."""

    uid: str = ""
    nickname: str = ""
    avatar: str = ""
    gold: int = 0
    frontend_id: str = ""
    address: str = ""
    location: str = ""
    last_login_ip: str = ""
    sex: int = 0
    score: int = 0
    spreader_id: str = ""
    prohibit_game: bool = False
    room_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        """The wire form of the profile."""
        return {
            "uid": self.uid,
            "nickname": self.nickname,
            "avatar": self.avatar,
            "gold": self.gold,
            "frontendId": self.frontend_id,
            "address": self.address,
            "location": self.location,
            "lastLoginIP": self.last_login_ip,
            "sex": self.sex,
            "score": self.score,
            "spreaderID": self.spreader_id,
            "prohibitGame": self.prohibit_game,
            "roomID": self.room_id,
        }


@dataclass
class RoomUser:
    """A user seated in a room."""

    user_info: UserInfo
    chair_id: int
    user_status: UserStatus = UserStatus.NONE

    @classmethod
    def from_profile(cls, profile: Any, chair_id: int) -> RoomUser:
        """Seat a user given an account record with uid, nickname, avatar, gold, sex and address."""
        info = UserInfo(
            uid=profile.uid,
            nickname=profile.nickname,
            avatar=profile.avatar,
            gold=profile.gold,
            sex=profile.sex,
            address=profile.address,
        )
        return cls(user_info=info, chair_id=chair_id, user_status=UserStatus.NONE)

    def to_dict(self) -> dict[str, Any]:
        """The wire form of the seated user."""
        return {
            "userInfo": self.user_info.to_dict(),
            "chairID": self.chair_id,
            "userStatus": int(self.user_status),
        }


@dataclass
class DismissPushData:
    """State of a vote on dismissing a room."""

    name_arr: list[str] = field(default_factory=list)
    chair_id_arr: list[Any] = field(default_factory=list)
    avatar_arr: list[str] = field(default_factory=list)
    online_arr: list[bool] = field(default_factory=list)
    ask_chair_id: int = 0
    tm: int = 0
    score_arr: list[int] | None = None

    def to_dict(self) -> dict[str, Any]:
        """The wire form of the vote."""
        return {
            "nameArr": list(self.name_arr),
            "chairIDArr": list(self.chair_id_arr),
            "avatarArr": list(self.avatar_arr),
            "onlineArr": list(self.online_arr),
            "askChairId": self.ask_chair_id,
            "tm": self.tm,
            "scoreArr": None if self.score_arr is None else list(self.score_arr),
        }


def _room_push(type_: int, data: Any) -> dict[str, Any]:
    return {"type": type_, "data": data, "pushRouter": ROOM_PUSH_ROUTER}


def update_user_info_push(room_id: str) -> dict[str, Any]:
    """Tell a client which room it is in; an empty id means none."""
    return {"roomID": room_id, "pushRouter": "UpdateUserInfoPush"}


def user_leave_room_push(room_user: RoomUser | None) -> dict[str, Any]:
    """Announce that a user left the room."""
    return _room_push(
        RoomMessageType.USER_LEAVE_ROOM_PUSH,
        {"roomUserInfo": None if room_user is None else room_user.to_dict()},
    )


def user_ready_push(chair_id: int) -> dict[str, Any]:
    """Announce that a seat is ready."""
    return _room_push(RoomMessageType.USER_READY_PUSH, {"chairID": chair_id})


def other_user_entry_room_push(room_user: RoomUser | None) -> dict[str, Any]:
    """Announce to the others that a user entered the room."""
    return _room_push(
        RoomMessageType.OTHER_USER_ENTRY_ROOM_PUSH,
        {"roomUserInfo": None if room_user is None else room_user.to_dict()},
    )


def ask_for_dismiss_push(data: DismissPushData | None) -> dict[str, Any]:
    """Announce the state of a dismissal vote."""
    return _room_push(
        RoomMessageType.ASK_FOR_DISMISS_PUSH,
        None if data is None else data.to_dict(),
    )