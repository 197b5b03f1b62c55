import json

import pytest

from cardrooms.room_proto import GameRule
from cardrooms.sanzhang_proto import (
    BureauReview,
    GameData,
    GameResult,
    GameStatus,
    MessageReq,
    UserStatus,
    UserWinRecord,
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


def _rule():
    return GameRule(game_frame_type=2, base_score=3, max_player_count=5)


def test_fresh_sizes_state_by_rule():
    data = GameData.fresh(_rule())
    assert data.chair_count == 5
    assert data.base_score == 3
    assert data.game_type == 2
    assert data.hand_cards == [None] * 5
    assert data.pour_scores == [None] * 5
    assert data.look_cards == [0] * 5
    assert data.cur_scores == [0] * 5
    assert data.user_status_array == [UserStatus.NONE] * 5
    assert data.user_trust_array == [False] * 10
    assert data.loser == [] and data.winner == []
    assert data.game_status == GameStatus.NONE


def test_fresh_lists_are_independent():
    data = GameData.fresh(_rule())
    data.look_cards[0] = 1
    other = GameData.fresh(_rule())
    assert other.look_cards[0] == 0


def test_to_dict_of_fresh_state():
    wire = GameData.fresh(_rule()).to_dict()
    assert wire["handCards"] == [None] * 5
    assert wire["userWinRecord"] is None
    assert wire["reviewRecord"] is None
    assert wire["gameStatus"] == 0
    assert wire["chairCount"] == 5
    json.dumps(wire)


def test_to_dict_serialises_nested_records():
    data = GameData.fresh(_rule())
    data.user_win_record = {"u1": UserWinRecord(uid="u1", nickname="n", score=7)}
    data.review_record = [BureauReview(uid="u1", cards=[1, 2, 3], is_banker=True)]
    data.result = GameResult(winners=[1])
    wire = data.to_dict()
    assert wire["userWinRecord"]["u1"]["score"] == 7
    assert wire["reviewRecord"][0]["cards"] == [1, 2, 3]
    assert wire["reviewRecord"][0]["isBanker"] is True
    assert wire["result"] == GameResult(winners=[1]).to_dict()


def test_message_req_parses_all_fields():
    raw = '{"type":304,"data":{"score":5,"type":1,"chairID":2,"cuopai":true}}'
    req = MessageReq.from_json(raw)
    assert req.type == 304
    assert req.data.score == 5
    assert req.data.type == 1
    assert req.data.chair_id == 2
    assert req.data.cuopai is True


def test_message_req_defaults_when_data_missing():
    req = MessageReq.from_json(b'{"type":312}')
    assert req.type == 312
    assert req.data.score == 0
    assert req.data.cuopai is False


@pytest.mark.parametrize(
    "raw",
    ['{"type":"x"}', "[]", "not json", '{"data":{"cuopai":1}}', '{"data":[]}'],
)
def test_message_req_rejects_bad_input(raw):
    with pytest.raises(ValueError):
        MessageReq.from_json(raw)


def test_update_user_info_gold_push():
    assert update_user_info_gold_push(9958) == {
        "gold": 9958,
        "pushRouter": "UpdateUserInfoPush",
    }


def test_status_banker_bureau_pushes():
    assert game_status_push(GameStatus.SEND_CARDS, 0) == {
        "type": 401,
        "data": {"gameStatus": 1, "tick": 0},
        "pushRouter": "GameMessagePush",
    }
    assert banker_push(0) == {
        "type": 414,
        "data": {"bankerChairID": 0},
        "pushRouter": "GameMessagePush",
    }
    assert bureau_push(6) == {
        "type": 411,
        "data": {"curBureau": 6},
        "pushRouter": "GameMessagePush",
    }


def test_look_push_with_and_without_cards():
    seen = look_push(1, [60, 2, 44], False)
    assert seen == {
        "type": 403,
        "data": {"chairID": 1, "cards": [60, 2, 44], "cuopai": False},
        "pushRouter": "GameMessagePush",
    }
    assert look_push(1, None, True)["data"]["cards"] is None


def test_pour_round_turn_pushes():
    pour = pour_score_push(0, 1, 1, 2, 0)
    assert pour["type"] == 404
    assert pour["data"] == {"chairID": 0, "score": 1, "chairScore": 1, "scores": 2, "type": 0}
    assert round_push(1) == {"type": 413, "data": {"round": 1}, "pushRouter": "GameMessagePush"}
    assert turn_push(1, 1)["data"] == {"curChairID": 1, "curScore": 1}
    assert turn_push(1, 1)["type"] == 406


def test_send_cards_push_copies_hands():
    hands = [[0, 0, 0], None]
    push = send_cards_push(hands)
    hands[0].append(9)
    assert push["type"] == 402
    assert push["data"]["handCards"] == [[0, 0, 0], None]


def test_compare_result_abandon_pushes():
    cmp_push = compare_push(0, 1, 1, 0)
    assert cmp_push["type"] == 405
    assert cmp_push["data"]["winChairID"] == 1
    assert cmp_push["data"]["loseChairID"] == 0
    result = GameResult(winners=[1], win_scores=[-2, 2], losers=[0])
    assert result_push(result)["data"]["result"] == result.to_dict()
    assert result_push(result)["type"] == 407
    assert abandon_push(2, UserStatus.ABANDON)["data"] == {"chairID": 2, "userStatus": 1}
    assert abandon_push(2, UserStatus.ABANDON)["type"] == 412