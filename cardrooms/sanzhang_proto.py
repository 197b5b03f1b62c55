"""Messages, state records and push payloads of the three-card poker game."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Sequence

if TYPE_CHECKING:
    from cardrooms.room_proto import GameRule


class GameStatus(IntEnum):
    """Phase of a three-card poker hand."""

    NONE = 0
    SEND_CARDS = 1
    POUR_SCORE = 2
    RESULT = 3


class GameType(IntEnum):
    """How many rounds a player must bet blind."""

    MEN1 = 1
    MEN2 = 2
    MEN3 = 3


class RoundType(IntEnum):
    """Round limit of a hand."""

    ROUND10 = 1
    ROUND20 = 2
    ROUND30 = 3


class UserStatus(IntEnum):
    """State of a seat within a hand."""

    NONE = 0
    ABANDON = 1
    TIMEOUT_ABANDON = 2
    LOOK = 4
    LOSE = 8
    WIN = 16
    HE = 32


TM_SEND_CARDS = 1
TM_POUR_SCORE = 30
TM_RESULT = 5

TRUST_SLOTS = 10

GAME_STATUS_PUSH = 401
GAME_SEND_CARDS_PUSH = 402
GAME_LOOK_NOTIFY = 303
GAME_LOOK_PUSH = 403
GAME_POUR_SCORE_NOTIFY = 304
GAME_POUR_SCORE_PUSH = 404
GAME_COMPARE_NOTIFY = 305
GAME_COMPARE_PUSH = 405
GAME_TURN_PUSH = 406
GAME_RESULT_PUSH = 407
GAME_END_PUSH = 409
GAME_CHAT_NOTIFY = 310
GAME_CHAT_PUSH = 410
GAME_BUREAU_PUSH = 411
GAME_ABANDON_NOTIFY = 312
GAME_ABANDON_PUSH = 412
GAME_ROUND_PUSH = 413
GAME_BANKER_PUSH = 414
GAME_TRUST_NOTIFY = 315
GAME_TRUST_PUSH = 415
GAME_REVIEW_NOTIFY = 316
GAME_REVIEW_PUSH = 416

PUSH_ROUTER = "GameMessagePush"


def _object(value: Any, what: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be a JSON object")
    return value


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


def _ints(values: Sequence[int] | None) -> list[int] | None:
    return None if values is None else [int(v) for v in values]


def _nested(rows: Sequence[Sequence[int] | None] | None) -> list[list[int] | None] | None:
    if rows is None:
        return None
    return [_ints(row) for row in rows]


def _plain(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    return to_dict() if callable(to_dict) else value


@dataclass
class MessageData:
    """Payload of a game message sent by a client."""

    cuopai: bool = False
    score: int = 0
    type: int = 0
    chair_id: int = 0


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
                cuopai=_bool_field(data, "cuopai"),
                score=_int_field(data, "score"),
                type=_int_field(data, "type"),
                chair_id=_int_field(data, "chairID"),
            ),
        )


@dataclass
class UserWinRecord:
    """Running score of one player over the session."""

    uid: str = ""
    nickname: str = ""
    avatar: str = ""
    score: int = 0

    def _to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "nickname": self.nickname,
            "avatar": self.avatar,
            "score": self.score,
        }


@dataclass
class BureauReview:
    """One player's part in a finished hand, for review."""

    uid: str = ""
    cards: list[int] | None = None
    pour_score: int = 0
    win_score: int = 0
    nick_name: str = ""
    avatar: str = ""
    is_banker: bool = False
    is_abandon: bool = False

    def _to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.uid,
            "cards": _ints(self.cards),
            "pourScore": self.pour_score,
            "winScore": self.win_score,
            "nickName": self.nick_name,
            "avatar": self.avatar,
            "isBanker": self.is_banker,
            "isAbandon": self.is_abandon,
        }


@dataclass
class GameData:
    """Full state of a three-card poker table."""

    banker_chair_id: int = 0
    chair_count: int = 0
    cur_bureau: int = 0
    cur_score: int = 0
    cur_scores: list[int] = field(default_factory=list)
    game_starter: bool = False
    game_status: GameStatus = GameStatus.NONE
    hand_cards: list[list[int] | None] = field(default_factory=list)
    look_cards: list[int] = field(default_factory=list)
    loser: list[int] = field(default_factory=list)
    winner: list[int] = field(default_factory=list)
    max_bureau: int = 0
    pour_scores: list[list[int] | None] = field(default_factory=list)
    game_type: int = 0
    base_score: int = 0
    result: Any = None
    round: int = 0
    tick: int = 0
    user_trust_array: list[bool] = field(default_factory=list)
    user_status_array: list[int] = field(default_factory=list)
    user_win_record: dict[str, UserWinRecord] | None = None
    review_record: list[BureauReview] | None = None
    trust_tm_array: list[int] | None = None
    cur_chair_id: int = 0

    @classmethod
    def fresh(cls, rule: GameRule) -> GameData:
        """State of a table before its first hand, sized by the rule."""
        chairs = rule.max_player_count
        return cls(
            game_type=int(rule.game_frame_type),
            base_score=rule.base_score,
            chair_count=chairs,
            pour_scores=[None] * chairs,
            hand_cards=[None] * chairs,
            look_cards=[0] * chairs,
            cur_scores=[0] * chairs,
            user_status_array=[UserStatus.NONE] * chairs,
            user_trust_array=[False] * TRUST_SLOTS,
            loser=[],
            winner=[],
        )

    def to_dict(self) -> dict[str, Any]:
        """The wire form of the table state."""
        return {
            "bankerChairID": self.banker_chair_id,
            "chairCount": self.chair_count,
            "curBureau": self.cur_bureau,
            "curScore": self.cur_score,
            "curScores": _ints(self.cur_scores),
            "gameStarter": self.game_starter,
            "gameStatus": int(self.game_status),
            "handCards": _nested(self.hand_cards),
            "lookCards": _ints(self.look_cards),
            "loser": _ints(self.loser),
            "winner": _ints(self.winner),
            "maxBureau": self.max_bureau,
            "pourScores": _nested(self.pour_scores),
            "gameType": int(self.game_type),
            "baseScore": self.base_score,
            "result": _plain(self.result),
            "round": self.round,
            "tick": self.tick,
            "userTrustArray": None
            if self.user_trust_array is None
            else list(self.user_trust_array),
            "userStatusArray": _ints(self.user_status_array),
            "userWinRecord": None
            if self.user_win_record is None
            else {k: v._to_dict() for k, v in self.user_win_record.items()},
            "reviewRecord": None
            if self.review_record is None
            else [r._to_dict() for r in self.review_record],
            "trustTmArray": _ints(self.trust_tm_array),
            "curChairID": self.cur_chair_id,
        }


@dataclass
class GameResult:
    """Settlement of a finished hand."""

    winners: list[int] = field(default_factory=list)
    win_scores: list[int] = field(default_factory=list)
    hand_cards: list[list[int] | None] = field(default_factory=list)
    cur_scores: list[int] = field(default_factory=list)
    losers: list[int] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """The wire form of the result."""
        return {
            "winners": _ints(self.winners),
            "winScores": _ints(self.win_scores),
            "handCards": _nested(self.hand_cards),
            "curScores": _ints(self.cur_scores),
            "losers": _ints(self.losers),
        }


def _push(type_: int, data: Any) -> dict[str, Any]:
    return {"type": type_, "data": data, "pushRouter": PUSH_ROUTER}


def update_user_info_gold_push(gold: int) -> dict[str, Any]:
    """Tell a client its gold balance changed."""
    return {"gold": gold, "pushRouter": "UpdateUserInfoPush"}


def banker_push(banker_chair_id: int) -> dict[str, Any]:
    """Announce the dealer seat."""
    return _push(GAME_BANKER_PUSH, {"bankerChairID": banker_chair_id})


def bureau_push(cur_bureau: int) -> dict[str, Any]:
    """Announce the current hand number."""
    return _push(GAME_BUREAU_PUSH, {"curBureau": cur_bureau})


def game_status_push(game_status: int, tick: int) -> dict[str, Any]:
    """Announce the phase of the hand and its countdown."""
    return _push(GAME_STATUS_PUSH, {"gameStatus": int(game_status), "tick": tick})


def send_cards_push(hand_cards: Sequence[Sequence[int] | None]) -> dict[str, Any]:
    """Deal hands to every seat."""
    return _push(GAME_SEND_CARDS_PUSH, {"handCards": _nested(hand_cards)})


def pour_score_push(
    chair_id: int, score: int, chair_score: int, scores: int, type_: int
) -> dict[str, Any]:
    """Announce a bet: the seat, its stake, its total and the whole pot."""
    return _push(
        GAME_POUR_SCORE_PUSH,
        {
            "chairID": chair_id,
            "score": score,
            "chairScore": chair_score,
            "scores": scores,
            "type": type_,
        },
    )


def round_push(round_: int) -> dict[str, Any]:
    """Announce the betting round."""
    return _push(GAME_ROUND_PUSH, {"round": round_})


def turn_push(cur_chair_id: int, cur_score: int) -> dict[str, Any]:
    """Announce whose turn it is and the current stake."""
    return _push(GAME_TURN_PUSH, {"curChairID": cur_chair_id, "curScore": cur_score})


def look_push(chair_id: int, cards: Sequence[int] | None, cuopai: bool) -> dict[str, Any]:
    """Announce that a seat looked at its cards; cards only for that seat."""
    return _push(
        GAME_LOOK_PUSH, {"cards": _ints(cards), "chairID": chair_id, "cuopai": cuopai}
    )


def compare_push(
    from_chair_id: int, to_chair_id: int, win_chair_id: int, lose_chair_id: int
) -> dict[str, Any]:
    """Announce the outcome of a showdown between two seats."""
    return _push(
        GAME_COMPARE_PUSH,
        {
            "fromChairID": from_chair_id,
            "toChairID": to_chair_id,
            "winChairID": win_chair_id,
            "loseChairID": lose_chair_id,
        },
    )


def result_push(result: GameResult | None) -> dict[str, Any]:
    """Announce the settlement."""
    return _push(
        GAME_RESULT_PUSH, {"result": None if result is None else result.to_dict()}
    )


def abandon_push(chair_id: int, user_status: int) -> dict[str, Any]:
    """Announce that a seat folded."""
    return _push(
        GAME_ABANDON_PUSH, {"chairID": chair_id, "userStatus": int(user_status)}
    )