import json
from types import SimpleNamespace

import pytest

from cardrooms.room_proto import (
    CreatorType,
    DismissPushData,
    GameRule,
    RoomCreator,
    RoomUser,
    UserInfo,
    UserStatus,
    ask_for_dismiss_push,
    other_user_entry_room_push,
    update_user_info_push,
    user_leave_room_push,
    user_ready_push,
)


def _profile():
    return SimpleNamespace(
        uid="1001", nickname="alice", avatar="a.png", gold=50, sex=1, address="here"
    )


def test_rule_round_trip():
    rule = GameRule(
        add_scores=[1, 2, 3],
        base_score=2,
        game_type=5,
        game_frame_type=1,
        max_player_count=4,
        min_player_count=2,
        qidui=True,
        can_enter=True,
    )
    assert GameRule.from_dict(rule.to_dict()) == rule
    assert GameRule.from_dict(json.loads(json.dumps(rule.to_dict()))) == rule


def test_rule_wire_keys():
    wire = GameRule(max_player_count=4, qidui=True).to_dict()
    assert wire["maxPlayerCount"] == 4
    assert wire["qidui"] is True
    assert wire["addScores"] == []
    assert len(wire) == 22


def test_rule_missing_and_unknown_keys():
    rule = GameRule.from_dict({"gameType": 1, "somethingElse": "x", "canWatch": None})
    assert rule == GameRule(game_type=1)


@pytest.mark.parametrize(
    "data",
    [
        {"baseScore": "1"},
        {"canEnter": 1},
        {"addScores": [1, "x"]},
        {"addScores": 3},
        {"maxPlayerCount": True},
    ],
)
def test_rule_rejects_wrong_types(data):
    with pytest.raises(ValueError):
        GameRule.from_dict(data)


def test_rule_rejects_non_mapping():
    with pytest.raises(ValueError):
        GameRule.from_dict([1, 2])


def test_room_user_from_profile():
    user = RoomUser.from_profile(_profile(), 3)
    assert user.chair_id == 3
    assert user.user_status == UserStatus.NONE
    assert user.user_info.uid == "1001"
    assert user.user_info.gold == 50
    assert user.user_info.address == "here"
    assert user.user_info.room_id == ""


def test_room_user_to_dict():
    user = RoomUser.from_profile(_profile(), 0)
    wire = user.to_dict()
    assert wire["chairID"] == 0
    assert wire["userStatus"] == 0
    assert wire["userInfo"] == user.user_info.to_dict()
    assert wire["userInfo"]["nickname"] == "alice"


def test_user_info_wire_keys():
    wire = UserInfo(uid="u", last_login_ip="127.0.0.1", spreader_id="s").to_dict()
    assert wire["lastLoginIP"] == "127.0.0.1"
    assert wire["spreaderID"] == "s"
    assert wire["prohibitGame"] is False


def test_room_creator_to_dict():
    assert RoomCreator(uid="1001", creator_type=CreatorType.UNION).to_dict() == {
        "uid": "1001",
        "creatorType": 2,
    }


def test_update_user_info_push():
    assert update_user_info_push("") == {"roomID": "", "pushRouter": "UpdateUserInfoPush"}


def test_user_ready_push():
    assert user_ready_push(2) == {
        "type": 401,
        "data": {"chairID": 2},
        "pushRouter": "RoomMessagePush",
    }


def test_entry_and_leave_pushes():
    user = RoomUser.from_profile(_profile(), 1)
    entry = other_user_entry_room_push(user)
    leave = user_leave_room_push(user)
    assert entry["type"] == 402
    assert leave["type"] == 404
    assert entry["data"]["roomUserInfo"] == user.to_dict()
    assert leave["data"]["roomUserInfo"] == user.to_dict()
    assert leave["pushRouter"] == "RoomMessagePush"


def test_ask_for_dismiss_push():
    data = DismissPushData(
        name_arr=["a", "b"],
        chair_id_arr=[True, None],
        avatar_arr=["x", "y"],
        online_arr=[True, True],
        ask_chair_id=0,
        tm=30,
    )
    push = ask_for_dismiss_push(data)
    assert push["type"] == 413
    assert push["data"] == data.to_dict()
    assert push["data"]["chairIDArr"] == [True, None]
    assert push["data"]["scoreArr"] is None
    assert push["data"]["tm"] == 30