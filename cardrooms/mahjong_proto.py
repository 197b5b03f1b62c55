"""Messages, state records and push payloads of the red-dragon mahjong game."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterable, Sequence


class OperateType(IntEnum):
    """What a player may do, or did, on a turn."""

    NONE = 0
    HU_CHI = 1
    HU_ZI = 2
    PENG = 3
    GANG_CHI = 4
    GANG_BU = 5
    GANG_ZI = 6
    GUO = 7
    QI = 8
    GET = 9


class GameStatus(IntEnum):
    """Phase of a mahjong hand."""

    NONE = 0
    DICES = 1
    SEND_CARDS = 2
    PLAYING = 3
    ZHA_MA = 4
    RESULT = 5


class GameType(IntEnum):
    """Number of red-dragon wild tiles in the wall."""

    HONG_ZHONG4 = 1
    HONG_ZHONG8 = 2


GAME_STATUS_TM_NONE = 0
GAME_STATUS_TM_DICES = 3
GAME_STATUS_TM_SEND = 3
GAME_STATUS_TM_PLAY = 0
GAME_STATUS_TM_ZHA = 5
GAME_STATUS_TM_RESULT = 5

OPERATE_TIME = 30
OPERATE_QI = 30
OPERATE_PG = 30

GAME_STATUS_PUSH = 401
GAME_BANKER_PUSH = 402
GAME_DICES_PUSH = 403
GAME_SEND_CARDS_PUSH = 404
GAME_REST_CARDS_COUNT_PUSH = 405
GAME_TURN_PUSH = 406
GAME_TURN_OPERATE_NOTIFY = 307
GAME_TURN_OPERATE_PUSH = 407
GAME_RESULT_PUSH = 408
GAME_BUREAU_PUSH = 409
GAME_END_PUSH = 410
GAME_CHAT_NOTIFY = 311
GAME_CHAT_PUSH = 411
GAME_TRUST_NOTIFY = 312
GAME_TRUST_PUSH = 412
GAME_REVIEW_NOTIFY = 313
GAME_REVIEW_PUSH = 413
GAME_DISMISS_PUSH = 414
GAME_GET_CARD_NOTIFY = 315
GAME_GET_CARD_PUSH = 415

PUSH_ROUTER = "GameMessagePush"


def _int_field(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"field {key!r} must be an integer, got {value!r}")
    return value


def _str_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string, got {value!r}")
    return value


def _object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be a JSON object")
    return value


def _cards_or_none(cards: Sequence[int] | None) -> list[int] | None:
    return None if cards is None else [int(c) for c in cards]


def _nested(rows: Sequence[Sequence[int] | None] | None) -> list[list[int] | None] | None:
    if rows is None:
        return None
    return [_cards_or_none(row) for row in rows]


@dataclass
class MessageData:
    """Payload of a game message sent by a client."""

    chair_id: int = 0
    type: int = 0
    msg: str = ""
    recipient_id: int = 0
    card: int = 0
    operate: int = 0


@dataclass
class MessageReq:
    """A game message sent by a client."""

    type: int = 0
    data: MessageData = field(default_factory=MessageData)

    @classmethod
    def from_json(cls, raw: str | bytes) -> MessageReq:
        """Parse a client message; raises ValueError on malformed input."""
        doc = _object(json.loads(raw), "message")
        data = _object(doc.get("data"), "message data")
        return cls(
            type=_int_field(doc, "type"),
            data=MessageData(
                chair_id=_int_field(data, "chairID"),
                type=_int_field(data, "type"),
                msg=_str_field(data, "msg"),
                recipient_id=_int_field(data, "recipientID"),
                card=_int_field(data, "card"),
                operate=_int_field(data, "operate"),
            ),
        )


@dataclass
class OperateRecord:
    """One operation performed during a hand."""

    chair_id: int
    card: int
    operate: int

    def _to_dict(self) -> dict[str, int]:
        return {
            "chairID": self.chair_id,
            "card": int(self.card),
            "operate": int(self.operate),
        }


@dataclass
class MyMaCard:
    """A bonus tile drawn at settlement."""

    card: int = 0
    win: bool = False


@dataclass
class GameResult:
    """Settlement of a finished hand."""

    scores: list[int] = field(default_factory=list)
    hand_cards: list[list[int] | None] = field(default_factory=list)
    my_ma_cards: list[MyMaCard] = field(default_factory=list)
    rest_cards: list[int] = field(default_factory=list)
    win_chair_id_array: list[int] = field(default_factory=list)
    gang_chair_id: int = 0
    fang_gang_array: list[int] = field(default_factory=list)
    hu_type: int = OperateType.NONE

    def to_dict(self) -> dict[str, Any]:
        """The wire form of the result."""
        return {
            "scores": list(self.scores),
            "handCards": _nested(self.hand_cards),
            "myMaCards": [{"card": m.card, "win": m.win} for m in self.my_ma_cards],
            "restCards": _cards_or_none(self.rest_cards),
            "winChairIDArray": list(self.win_chair_id_array),
            "gangChairID": self.gang_chair_id,
            "fangGangArray": list(self.fang_gang_array),
            "huType": int(self.hu_type),
        }


@dataclass
class GameData:
    """Full state of a mahjong table."""

    banker_chair_id: int = 0
    chair_count: int = 0
    cur_bureau: int = 0
    game_status: GameStatus = GameStatus.NONE
    game_started: bool = False
    tick: int = 0
    max_bureau: int = 0
    cur_chair_id: int = 0
    user_trust_array: list[int] | None = None
    hand_cards: list[list[int] | None] = field(default_factory=list)
    operate_arrays: list[list[int] | None] = field(default_factory=list)
    operate_record: list[OperateRecord] = field(default_factory=list)
    rest_cards_count: int = 0
    result: GameResult | None = None

    def to_dict(self) -> dict[str, Any]:
        """The wire form of the table state."""
        return {
            "bankerChairID": self.banker_chair_id,
            "chairCount": self.chair_count,
            "curBureau": self.cur_bureau,
            "gameStatus": int(self.game_status),
            "gameStarted": self.game_started,
            "tick": self.tick,
            "maxBureau": self.max_bureau,
            "curChairID": self.cur_chair_id,
            "userTrustArray": None
            if self.user_trust_array is None
            else list(self.user_trust_array),
            "handCards": _nested(self.hand_cards),
            "operateArrays": _nested(self.operate_arrays),
            "operateRecord": [r._to_dict() for r in self.operate_record],
            "restCardsCount": self.rest_cards_count,
            "result": None if self.result is None else self.result.to_dict(),
        }


def _push(type_: int, data: Any) -> dict[str, Any]:
    return {"type": type_, "data": data, "pushRouter": PUSH_ROUTER}


def _visible_card(card: int) -> int | None:
    return int(card) if 0 < card < 36 else None


def game_status_push(game_status: int, tick: int) -> dict[str, Any]:
    """Announce the phase of the hand and its countdown."""
    return _push(GAME_STATUS_PUSH, {"gameStatus": int(game_status), "tick": tick})


def banker_push(banker_chair_id: int) -> dict[str, Any]:
    """Announce the dealer seat."""
    return _push(GAME_BANKER_PUSH, {"bankerChairID": banker_chair_id})


def dices_push(dice1: int, dice2: int) -> dict[str, Any]:
    """Announce the dice throw."""
    return _push(GAME_DICES_PUSH, {"dice1": dice1, "dice2": dice2})


def send_cards_push(
    hand_cards: Sequence[Sequence[int] | None], chair_id: int
) -> dict[str, Any]:
    """Deal hands; chair_id is the seat the message is meant for."""
    return _push(
        GAME_SEND_CARDS_PUSH, {"handCards": _nested(hand_cards), "chairID": chair_id}
    )


def rest_cards_count_push(rest_cards_count: int) -> dict[str, Any]:
    """Announce how many tiles remain in the wall."""
    return _push(GAME_REST_CARDS_COUNT_PUSH, {"restCardsCount": rest_cards_count})


def bureau_push(cur_bureau: int) -> dict[str, Any]:
    """Announce the current hand number."""
    return _push(GAME_BUREAU_PUSH, {"curBureau": cur_bureau})


def turn_push(
    chair_id: int, card: int, tick: int, operate_array: Iterable[int] | None
) -> dict[str, Any]:
    """Announce whose turn it is; a card outside the tile range is sent as null."""
    return _push(
        GAME_TURN_PUSH,
        {
            "chairID": chair_id,
            "card": _visible_card(card),
            "tick": tick,
            "operateArray": None
            if operate_array is None
            else [int(op) for op in operate_array],
        },
    )


def chat_push(chair_id: int, type_: int, msg: str, recipient_id: int) -> dict[str, Any]:
    """Relay a chat message."""
    return _push(
        GAME_CHAT_PUSH,
        {"chairID": chair_id, "type": type_, "msg": msg, "recipientID": recipient_id},
    )


def turn_operate_push(
    chair_id: int, card: int, operate: int, success: bool
) -> dict[str, Any]:
    """Announce an operation; a card outside the tile range is sent as null."""
    return _push(
        GAME_TURN_OPERATE_PUSH,
        {
            "chairID": chair_id,
            "card": _visible_card(card),
            "operate": int(operate),
            "success": success,
        },
    )


def result_push(result: GameResult) -> dict[str, Any]:
    """Announce the settlement."""
    return _push(GAME_RESULT_PUSH, {"result": result.to_dict()})