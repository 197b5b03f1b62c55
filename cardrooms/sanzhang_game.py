"""Three-card poker played at one room's table."""

from __future__ import annotations

import copy
import logging
import random
import threading
from typing import Any, Callable, Iterable

from cardrooms.room_proto import GameRule, RoomUser
from cardrooms.room_proto import UserStatus as SeatStatus
from cardrooms.sanzhang_logic import SanZhangLogic
from cardrooms.sanzhang_proto import (
    GAME_ABANDON_NOTIFY,
    GAME_COMPARE_NOTIFY,
    GAME_LOOK_NOTIFY,
    GAME_POUR_SCORE_NOTIFY,
    TM_POUR_SCORE,
    GameData,
    GameResult,
    GameStatus,
    MessageReq,
    UserStatus,
    abandon_push,
    banker_push,
    bureau_push,
    compare_push,
    game_status_push,
    look_push,
    pour_score_push,
    result_push,
    round_push,
    send_cards_push,
    turn_push,
    update_user_info_gold_push,
)
from cardrooms.session import RoomFrame, Session

_log = logging.getLogger(__name__)

SERVER_PUSH_ROUTE = "ServerMessagePush"
_READY_DELAY = 5.0
_ABANDON_DELAY = 1.0


class SanZhangGame:
    """Dealing, betting, looking, showdowns and settlement of three-card poker."""

    def __init__(self, rule: GameRule, room: RoomFrame) -> None:
        self._rule = rule
        self._room = room
        self._data = GameData.fresh(rule)
        self._logic = SanZhangLogic()
        self._result: GameResult | None = None
        self._rng = random.Random()
        self._lock = threading.RLock()

    # -- public interface -------------------------------------------------

    def game_data(self, session: Session) -> GameData:
        """A copy of the table state in which only the viewer's looked-at cards show."""
        with self._lock:
            user = self._room.users[session.uid]
            view = copy.deepcopy(self._data)
            view.hand_cards = [
                None if hand is None else [0, 0, 0] for hand in self._data.hand_cards
            ]
            if self._data.look_cards[user.chair_id] == 1:
                view.hand_cards[user.chair_id] = list(
                    self._data.hand_cards[user.chair_id] or []
                )
            return view

    def start_game(self, session: Session, user: RoomUser) -> None:
        """Deal a hand and open the first betting turn."""
        with self._lock:
            if not self._rule.add_scores:
                raise ValueError("game rule has no add scores")
            data = self._data
            users = self._all_users()
            self._push(users, update_user_info_gold_push(user.user_info.gold), session)
            if data.cur_bureau == 0:
                data.banker_chair_id = self._rng.randrange(len(users))
            data.cur_chair_id = data.banker_chair_id
            self._push(users, banker_push(data.banker_chair_id), session)
            data.cur_bureau += 1
            self._push(users, bureau_push(data.cur_bureau), session)
            data.game_status = GameStatus.SEND_CARDS
            self._push(users, game_status_push(data.game_status, 0), session)
            self._send_cards(session)
            data.game_status = GameStatus.POUR_SCORE
            self._push(users, game_status_push(data.game_status, TM_POUR_SCORE), session)
            data.cur_score = self._rule.add_scores[0] * self._rule.base_score
            for seated in list(self._room.users.values()):
                self._push(
                    [seated.user_info.uid],
                    pour_score_push(seated.chair_id, data.cur_score, data.cur_score, 1, 0),
                    session,
                )
            data.round = 1
            self._push(users, round_push(data.round), session)
            for seated in list(self._room.users.values()):
                self._push(
                    [seated.user_info.uid],
                    turn_push(data.cur_chair_id, data.cur_score),
                    session,
                )

    def handle_message(self, user: RoomUser, session: Session, msg: bytes | str) -> None:
        """Act on a look, bet, showdown or fold request; malformed messages are ignored."""
        try:
            req = MessageReq.from_json(msg)
        except ValueError:
            _log.warning("sanzhang: ignoring malformed game message")
            return
        with self._lock:
            if req.type == GAME_LOOK_NOTIFY:
                self._on_look(user, session, req.data.cuopai)
            elif req.type == GAME_POUR_SCORE_NOTIFY:
                self._on_pour_score(user, session, req.data.score, req.data.type)
            elif req.type == GAME_COMPARE_NOTIFY:
                self._on_compare(user, session, req.data.chair_id)
            elif req.type == GAME_ABANDON_NOTIFY:
                self._on_abandon(user, session)

    def is_playing_chair(self, chair_id: int) -> bool:
        """Whether a user in the playing state sits in the chair."""
        return any(
            u.chair_id == chair_id and u.user_status == SeatStatus.PLAYING
            for u in self._room.users.values()
        )

    # -- helpers ----------------------------------------------------------

    def _push(self, users: Iterable[str], data: Any, session: Session) -> None:
        session.push(list(users), data, SERVER_PUSH_ROUTE)

    def _broadcast(self, data: Any, session: Session) -> None:
        self._push(self._all_users(), data, session)

    def _all_users(self) -> list[str]:
        return [u.user_info.uid for u in self._room.users.values()]

    def _schedule(self, delay: float, action: Callable[[], None]) -> None:
        def run() -> None:
            with self._lock:
                action()

        timer = threading.Timer(delay, run)
        timer.daemon = True
        timer.start()

    def _send_cards(self, session: Session) -> None:
        data = self._data
        self._logic.wash_cards()
        for chair in range(data.chair_count):
            if self.is_playing_chair(chair):
                data.hand_cards[chair] = self._logic.get_cards()
        hidden = [None if hand is None else [0, 0, 0] for hand in data.hand_cards]
        self._broadcast(send_cards_push(hidden), session)

    def _turn_refused(self, user: RoomUser, action: str) -> bool:
        data = self._data
        if data.game_status != GameStatus.POUR_SCORE or data.cur_chair_id != user.chair_id:
            _log.warning(
                "room %s: sanzhang %s refused: gameStatus=%d, curChairID=%d, chairID=%d",
                self._room.room_id,
                action,
                data.game_status,
                data.cur_chair_id,
                user.chair_id,
            )
            return True
        if not self.is_playing_chair(user.chair_id):
            _log.warning("room %s: sanzhang %s refused: not playing", self._room.room_id, action)
            return True
        return False

    def _on_look(self, user: RoomUser, session: Session, cuopai: bool) -> None:
        if self._turn_refused(user, "look"):
            return
        data = self._data
        data.user_status_array[user.chair_id] = UserStatus.LOOK
        data.look_cards[user.chair_id] = 1
        for seated in list(self._room.users.values()):
            cards = data.hand_cards[seated.chair_id] if seated.chair_id == data.cur_chair_id else None
            self._push([seated.user_info.uid], look_push(data.cur_chair_id, cards, cuopai), session)

    def _on_pour_score(self, user: RoomUser, session: Session, score: int, type_: int) -> None:
        if self._turn_refused(user, "pour score"):
            return
        if score < 0:
            _log.warning("room %s: sanzhang pour score refused: negative score", self._room.room_id)
            return
        data = self._data
        if data.pour_scores[user.chair_id] is None:
            data.pour_scores[user.chair_id] = []
        data.pour_scores[user.chair_id].append(score)
        pot = sum(sum(p) for p in data.pour_scores if p is not None)
        chair_total = sum(data.pour_scores[user.chair_id])
        self._broadcast(pour_score_push(user.chair_id, score, chair_total, pot, type_), session)
        self._end_pour_score(session)

    def _end_pour_score(self, session: Session) -> None:
        data = self._data
        self._broadcast(round_push(self._cur_round()), session)
        gamers = sum(
            1
            for chair in range(data.chair_count)
            if self.is_playing_chair(chair) and chair not in data.loser
        )
        if gamers == 1:
            self._start_result(session)
            return
        for _ in range(data.chair_count):
            data.cur_chair_id = (data.cur_chair_id + 1) % data.chair_count
            if self.is_playing_chair(data.cur_chair_id):
                break
        data.game_status = GameStatus.POUR_SCORE
        self._broadcast(game_status_push(data.game_status, TM_POUR_SCORE), session)
        self._broadcast(turn_push(data.cur_chair_id, data.cur_score), session)

    def _cur_round(self) -> int:
        data = self._data
        chair = data.cur_chair_id
        for _ in range(data.chair_count):
            chair = (chair + 1) % data.chair_count
            if self.is_playing_chair(chair):
                return len(data.pour_scores[chair] or [])
        return 1

    def _on_compare(self, user: RoomUser, session: Session, chair_id: int) -> None:
        data = self._data
        from_chair, to_chair = user.chair_id, chair_id
        for chair in (from_chair, to_chair):
            if not 0 <= chair < data.chair_count or data.hand_cards[chair] is None:
                raise ValueError(f"chair {chair} holds no cards")
        result = self._logic.compare_cards(data.hand_cards[from_chair], data.hand_cards[to_chair])
        if result > 0:
            win_chair, lose_chair = from_chair, to_chair
        else:
            # a tie goes against the player who asked for the showdown
            win_chair, lose_chair = to_chair, from_chair
        self._broadcast(compare_push(from_chair, to_chair, win_chair, lose_chair), session)
        data.user_status_array[win_chair] = UserStatus.WIN
        data.user_status_array[lose_chair] = UserStatus.LOSE
        data.loser.append(lose_chair)
        data.winner.append(win_chair)
        self._end_pour_score(session)

    def _start_result(self, session: Session) -> None:
        data = self._data
        data.game_status = GameStatus.RESULT
        self._broadcast(game_status_push(data.game_status, 0), session)
        if self._result is None:
            self._result = GameResult()
        result = self._result
        result.winners = data.winner
        result.hand_cards = data.hand_cards
        result.cur_scores = data.cur_scores
        result.losers = data.loser
        win_scores = [0] * data.chair_count
        for chair in range(data.chair_count):
            poured = data.pour_scores[chair]
            if poured is None:
                continue
            total = sum(poured)
            win_scores[chair] = -total
            for index in range(len(data.winner)):
                win_scores[index] += total // len(data.winner)
        result.win_scores = win_scores
        self._broadcast(result_push(result), session)
        self._reset_game(session)
        self._game_end(session)

    def _reset_game(self, session: Session) -> None:
        self._data = GameData.fresh(self._rule)
        self._data.game_status = GameStatus.NONE
        self._broadcast(game_status_push(self._data.game_status, 0), session)
        self._room.end_game(session)

    def _game_end(self, session: Session) -> None:
        data = self._data
        assert self._result is not None
        for chair in range(data.chair_count):
            if self._result.win_scores[chair] > 0:
                data.banker_chair_id = chair
                data.cur_chair_id = chair

        def ready_all() -> None:
            for seated in list(self._room.users.values()):
                self._room.user_ready(seated.user_info.uid, session)

        self._schedule(_READY_DELAY, ready_all)

    def _on_abandon(self, user: RoomUser, session: Session) -> None:
        data = self._data
        if not self.is_playing_chair(user.chair_id):
            return
        if user.chair_id in data.loser:
            return
        data.loser.append(user.chair_id)
        for chair in range(data.chair_count):
            if self.is_playing_chair(chair) and chair != user.chair_id:
                data.winner.append(chair)
        data.user_status_array[user.chair_id] = UserStatus.ABANDON
        self._broadcast(abandon_push(user.chair_id, data.user_status_array[user.chair_id]), session)
        self._schedule(_ABANDON_DELAY, lambda: self._end_pour_score(session))