"""Red-dragon mahjong played at one room's table."""

from __future__ import annotations

import copy
import logging
import random
import threading
from typing import Any, Callable, Iterable, Sequence

from cardrooms.mahjong_logic import MahjongLogic
from cardrooms.mahjong_proto import (
    GAME_CHAT_NOTIFY,
    GAME_GET_CARD_NOTIFY,
    GAME_STATUS_TM_DICES,
    GAME_STATUS_TM_PLAY,
    GAME_TURN_OPERATE_NOTIFY,
    OPERATE_TIME,
    GameData,
    GameResult,
    GameStatus,
    GameType,
    MessageData,
    MessageReq,
    OperateRecord,
    OperateType,
    banker_push,
    bureau_push,
    chat_push,
    dices_push,
    game_status_push,
    rest_cards_count_push,
    result_push,
    send_cards_push,
    turn_operate_push,
    turn_push,
)
from cardrooms.room_proto import GameRule, RoomUser
from cardrooms.session import RoomFrame, Session
from cardrooms.tiles import Tile

_log = logging.getLogger(__name__)

SERVER_PUSH_ROUTE = "ServerMessagePush"
HIDDEN_CARD = 36
HAND_SIZE = 13
MAX_HAND = 14

_DEAL_DELAY = 1.0
_TURN_TICK = 1.0
_RESULT_DELAY = 3.0

# The seat that is dealt a fixed hand instead of the one drawn from the wall.
_PRESET_CHAIR = 1
_PRESET_HAND = (
    Tile.WAN1, Tile.WAN1, Tile.WAN2, Tile.WAN2, Tile.WAN3, Tile.WAN5, Tile.WAN5,
    Tile.WAN5, Tile.TONG1, Tile.TONG1, Tile.TONG1, Tile.ZHONG, Tile.TONG4,
)


def _full_wall(game_frame_type: int) -> int:
    zhong = 8 if game_frame_type == GameType.HONG_ZHONG8 else 4
    return 9 * 3 * 4 + zhong


def _remove_cards(cards: Sequence[int] | None, card: int, times: int) -> list[int]:
    """The cards without the first `times` occurrences of card."""
    kept: list[int] = []
    removed = 0
    for c in cards or []:
        if c == card and removed < times:
            removed += 1
            continue
        kept.append(c)
    return kept


def _initial_data(rule: GameRule) -> GameData:
    chairs = rule.max_player_count
    return GameData(
        chair_count=chairs,
        hand_cards=[None] * chairs,
        game_status=GameStatus.NONE,
        operate_record=[],
        operate_arrays=[None] * chairs,
        cur_chair_id=-1,
        rest_cards_count=_full_wall(rule.game_frame_type),
    )


class MahjongGame:
    """Dealing, drawing, discarding, melding and settlement of red-dragon mahjong."""

    def __init__(self, rule: GameRule, room: RoomFrame) -> None:
        self._rule = rule
        self._room = room
        self._data = _initial_data(rule)
        self._logic = MahjongLogic(rule.game_frame_type, rule.qidui)
        chairs = self._data.chair_count
        self._requested_cards = [0] * chairs
        self._turn_timers: list[threading.Timer | None] = [None] * chairs
        self._rng = random.Random()
        self._lock = threading.RLock()

    # -- public interface -------------------------------------------------

    def game_data(self, session: Session) -> GameData:
        """A copy of the table state in which only the viewer's own tiles show."""
        with self._lock:
            chair = self._room.users[session.uid].chair_id
            view = copy.deepcopy(self._data)
            hands: list[list[int] | None] = []
            for index, hand in enumerate(self._data.hand_cards):
                if index == chair:
                    hands.append(None if hand is None else list(hand))
                else:
                    hands.append([HIDDEN_CARD] * len(hand or []))
            view.hand_cards = hands
            if self._data.game_status == GameStatus.NONE:
                view.rest_cards_count = _full_wall(self._rule.game_frame_type)
            return view

    def start_game(self, session: Session, user: RoomUser) -> None:
        """Throw the dice, deal the hands and schedule the dealer's first draw."""
        with self._lock:
            data = self._data
            data.game_started = True
            data.game_status = GameStatus.DICES
            self._broadcast(game_status_push(data.game_status, GAME_STATUS_TM_DICES), session)
            if data.cur_bureau == 0:
                data.banker_chair_id = 0
            self._broadcast(banker_push(data.banker_chair_id), session)
            dice1 = self._rng.randint(1, 6)
            dice2 = self._rng.randint(1, 6)
            self._broadcast(dices_push(dice1, dice2), session)
            self._send_hand_cards(session)
            data.cur_bureau += 1
            self._broadcast(bureau_push(data.cur_bureau), session)

    def handle_message(self, user: RoomUser, session: Session, msg: bytes | str) -> None:
        """Act on a chat, turn operation or tile request; malformed messages are ignored."""
        try:
            req = MessageReq.from_json(msg)
        except ValueError:
            _log.warning("mahjong: ignoring malformed game message")
            return
        with self._lock:
            if req.type == GAME_CHAT_NOTIFY:
                self._on_chat(user, session, req.data)
            elif req.type == GAME_TURN_OPERATE_NOTIFY:
                self._on_turn_operate(user, session, req.data)
            elif req.type == GAME_GET_CARD_NOTIFY:
                self._requested_cards[user.chair_id] = req.data.card

    # -- pushing ----------------------------------------------------------

    def _push(self, users: Iterable[str], data: Any, session: Session) -> None:
        session.push(list(users), data, SERVER_PUSH_ROUTE)

    def _broadcast(self, data: Any, session: Session) -> None:
        self._push(self._all_users(), data, session)

    def _all_users(self) -> list[str]:
        return [u.user_info.uid for u in self._room.users.values()]

    def _user_at(self, chair: int) -> RoomUser:
        for user in self._room.users.values():
            if user.chair_id == chair:
                return user
        raise LookupError(f"no user sits in chair {chair}")

    # -- timers -----------------------------------------------------------

    def _schedule(self, delay: float, action: Callable[[], None]) -> threading.Timer:
        def run() -> None:
            with self._lock:
                action()

        timer = threading.Timer(delay, run)
        timer.daemon = True
        timer.start()
        return timer

    def _cancel_turn_timer(self, chair: int) -> None:
        timer = self._turn_timers[chair]
        if timer is not None:
            timer.cancel()
        self._turn_timers[chair] = None

    def _arm_turn_timer(self, chair: int, action: Callable[[], None]) -> None:
        holder: list[threading.Timer] = []

        def run() -> None:
            with self._lock:
                if holder and self._turn_timers[chair] is holder[0]:
                    action()

        timer = threading.Timer(_TURN_TICK, run)
        timer.daemon = True
        holder.append(timer)
        self._turn_timers[chair] = timer
        timer.start()

    def _turn_schedule(
        self, chair: int, card: int, operations: list[int], session: Session
    ) -> None:
        self._cancel_turn_timer(chair)

        def tick() -> None:
            if self._data.tick <= 0:
                self._turn_timers[chair] = None
                self._user_auto_operate(chair, card, operations, session)
            else:
                self._data.tick -= 1
                self._arm_turn_timer(chair, tick)

        self._arm_turn_timer(chair, tick)

    # -- dealing and turns ------------------------------------------------

    def _send_hand_cards(self, session: Session) -> None:
        data = self._data
        self._logic.wash_cards()
        for chair in range(data.chair_count):
            data.hand_cards[chair] = self._logic.get_cards(HAND_SIZE)
            if chair == _PRESET_CHAIR:
                data.hand_cards[chair] = [int(t) for t in _PRESET_HAND]
        for chair in range(data.chair_count):
            view = [
                list(hand or []) if index == chair else [HIDDEN_CARD] * len(hand or [])
                for index, hand in enumerate(data.hand_cards)
            ]
            uid = self._user_at(chair).user_info.uid
            self._push([uid], send_cards_push(view, chair), session)
        self._broadcast(rest_cards_count_push(self._logic.rest_cards_count()), session)

        def begin_play() -> None:
            data.game_status = GameStatus.PLAYING
            self._broadcast(game_status_push(data.game_status, GAME_STATUS_TM_PLAY), session)
            self._set_turn(data.banker_chair_id, session)

        self._schedule(_DEAL_DELAY, begin_play)

    def _set_turn(self, chair: int, session: Session) -> None:
        data = self._data
        data.cur_chair_id = chair
        hand = list(data.hand_cards[chair] or [])
        if len(hand) >= MAX_HAND:
            _log.warning("mahjong: chair %d already drew a tile", chair)
            return
        card = self._requested_cards[chair]
        if 0 < card < 36:
            card = self._logic.take_card(card)
            self._requested_cards[chair] = 0
        if card <= 0 or card >= 36:
            drawn = self._logic.get_cards(1)
            if not drawn:
                return
            card = drawn[0]
        hand.append(card)
        data.hand_cards[chair] = hand
        operations = self._my_operate_array(chair, card)
        for index in range(data.chair_count):
            uid = self._user_at(index).user_info.uid
            if index == chair:
                self._game_turn([uid], chair, card, operations, session)
                data.operate_arrays[index] = list(operations)
                data.operate_record.append(OperateRecord(index, int(card), OperateType.GET))
                self._turn_schedule(chair, card, operations, session)
            else:
                self._game_turn([uid], index, HIDDEN_CARD, operations, session)
        self._broadcast(rest_cards_count_push(self._logic.rest_cards_count()), session)

    def _game_turn(
        self,
        uids: list[str] | None,
        chair: int,
        card: int,
        operations: list[int],
        session: Session,
    ) -> None:
        self._data.tick = OPERATE_TIME
        payload = turn_push(chair, card, self._data.tick, operations)
        if uids is None:
            self._broadcast(payload, session)
        else:
            self._push(uids, payload, session)

    def _my_operate_array(self, chair: int, card: int) -> list[int]:
        hand = self._data.hand_cards[chair] or []
        operations: list[int] = [OperateType.QI]
        if self._logic.can_hu(hand, -1):
            operations.append(OperateType.HU_ZI)
        if sum(1 for c in hand if c == card) == 4:
            operations.append(OperateType.GANG_ZI)
        for record in self._data.operate_record:
            if (
                record.chair_id == chair
                and record.operate == OperateType.PENG
                and record.card == card
            ):
                operations.append(OperateType.GANG_BU)
        return operations

    def _next_turn(self, last_card: int, session: Session) -> None:
        data = self._data
        has_other = False
        if 0 < last_card < 36:
            for chair in range(data.chair_count):
                if chair == data.cur_chair_id:
                    continue
                operations = self._logic.get_operate_array(
                    data.hand_cards[chair] or [], last_card
                )
                if operations:
                    has_other = True
                    data.tick = OPERATE_TIME
                    self._broadcast(
                        turn_push(chair, last_card, OPERATE_TIME, operations), session
                    )
                    data.operate_arrays[chair] = [int(op) for op in operations]
                    self._turn_schedule(chair, 0, list(operations), session)
        if not has_other:
            self._set_turn((data.cur_chair_id + 1) % data.chair_count, session)

    # -- operations -------------------------------------------------------

    def _on_chat(self, user: RoomUser, session: Session, data: MessageData) -> None:
        self._broadcast(
            chat_push(user.chair_id, data.type, data.msg, data.recipient_id), session
        )

    def _claimed_card(self, card: int, what: str) -> int:
        if card != 0:
            return card
        if not self._data.operate_record:
            _log.error("mahjong: %s without a previous operation", what)
            return card
        return self._data.operate_record[-1].card

    def _record(self, chair: int, card: int, operate: int) -> None:
        self._data.operate_record.append(OperateRecord(chair, int(card), int(operate)))

    def _on_turn_operate(self, user: RoomUser, session: Session, msg: MessageData) -> None:
        data = self._data
        chair = user.chair_id
        operate = msg.operate
        card = msg.card
        self._cancel_turn_timer(chair)
        if operate == OperateType.QI:
            self._broadcast(turn_operate_push(chair, card, operate, True), session)
            data.hand_cards[chair] = _remove_cards(data.hand_cards[chair], card, 1)
            self._record(chair, card, operate)
            data.operate_arrays[chair] = None
            self._next_turn(card, session)
        elif operate == OperateType.GUO:
            self._broadcast(turn_operate_push(chair, card, operate, True), session)
            self._record(chair, card, operate)
            self._set_turn(chair, session)
        elif operate in (OperateType.PENG, OperateType.GANG_CHI):
            card = self._claimed_card(card, OperateType(operate).name.lower())
            self._broadcast(turn_operate_push(chair, card, operate, True), session)
            taken = 2 if operate == OperateType.PENG else 3
            data.hand_cards[chair] = _remove_cards(data.hand_cards[chair], card, taken)
            self._record(chair, card, operate)
            data.operate_arrays[chair] = [OperateType.QI]
            self._broadcast(
                turn_push(chair, 0, OPERATE_TIME, data.operate_arrays[chair]), session
            )
            data.cur_chair_id = chair
        elif operate == OperateType.HU_CHI:
            card = self._claimed_card(card, "hu_chi")
            self._broadcast(turn_operate_push(chair, card, operate, True), session)
            data.hand_cards[chair] = list(data.hand_cards[chair] or []) + [card]
            self._record(chair, card, operate)
            data.operate_arrays[chair] = None
            data.cur_chair_id = chair
            self._game_end(session)
        elif operate == OperateType.HU_ZI:
            self._broadcast(turn_operate_push(chair, card, operate, True), session)
            self._record(chair, card, operate)
            data.operate_arrays[chair] = None
            data.cur_chair_id = chair
            self._game_end(session)
        elif operate == OperateType.GANG_ZI:
            self._self_gang(chair, msg.card, operate, 4, session)
        elif operate == OperateType.GANG_BU and data.cur_chair_id == chair:
            self._self_gang(chair, msg.card, operate, 1, session)

    def _self_gang(
        self, chair: int, shown_card: int, operate: int, times: int, session: Session
    ) -> None:
        data = self._data
        hand = data.hand_cards[chair] or []
        if not hand:
            raise ValueError(f"chair {chair} holds no tiles")
        card = hand[-1]
        for index in range(data.chair_count):
            uid = self._user_at(index).user_info.uid
            visible = card if index == chair else shown_card
            self._push([uid], turn_operate_push(chair, visible, operate, True), session)
        data.hand_cards[chair] = _remove_cards(hand, card, times)
        self._record(chair, card, operate)
        self._set_turn(chair, session)

    def _user_auto_operate(
        self, chair: int, card: int, operations: list[int], session: Session
    ) -> None:
        user = self._user_at(chair)
        if OperateType.QI in operations:
            self._on_turn_operate(user, session, MessageData(operate=OperateType.QI, card=card))
        elif OperateType.GUO in operations:
            self._on_turn_operate(user, session, MessageData(operate=OperateType.GUO, card=0))

    # -- settlement -------------------------------------------------------

    def _game_end(self, session: Session) -> None:
        data = self._data
        data.game_status = GameStatus.RESULT
        self._broadcast(game_status_push(data.game_status, 0), session)
        if not data.operate_record:
            _log.error("mahjong: hand ended without any operation")
            return
        last = data.operate_record[-1]
        if last.operate not in (OperateType.HU_CHI, OperateType.HU_ZI):
            _log.error("mahjong: hand ended but the last operation is not a win")
            return
        result = GameResult(
            scores=[0] * data.chair_count,
            hand_cards=data.hand_cards,
            rest_cards=self._logic.rest_cards(),
            win_chair_id_array=[last.chair_id],
            hu_type=last.operate,
            my_ma_cards=[],
            fang_gang_array=[],
        )
        data.result = result
        self._broadcast(result_push(result), session)

        def finish() -> None:
            self._room.end_game(session)
            self._reset_game(session)

        self._schedule(_RESULT_DELAY, finish)

    def _reset_game(self, session: Session) -> None:
        data = self._data
        data.game_started = False
        data.game_status = GameStatus.NONE
        self._broadcast(game_status_push(data.game_status, 0), session)
        self._broadcast(rest_cards_count_push(self._logic.rest_cards_count()), session)
        for chair in range(data.chair_count):
            data.hand_cards[chair] = None
            data.operate_arrays[chair] = None
        data.operate_record = []
        data.cur_chair_id = -1
        data.result = None