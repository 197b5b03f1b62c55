import pytest

from cardrooms.session import MemorySession, Session


def test_uid_is_kept():
    session = MemorySession("1001")
    assert session.uid == "1001"


def test_put_then_get():
    session = MemorySession("1001")
    session.put("roomId", "123456")
    assert session.get("roomId") == "123456"


def test_get_missing_key_is_none():
    session = MemorySession("1001")
    assert session.get("roomId") is None


def test_put_overwrites():
    session = MemorySession("1001")
    session.put("roomId", "a")
    session.put("roomId", "b")
    assert session.get("roomId") == "b"


def test_push_is_recorded_in_order():
    session = MemorySession("1001")
    session.push(["a", "b"], {"x": 1}, "ServerMessagePush")
    session.push(["c"], {"y": 2}, "ServerMessagePush")
    assert len(session.pushes) == 2
    first = session.pushes[0]
    assert first.users == ("a", "b")
    assert first.data == {"x": 1}
    assert first.route == "ServerMessagePush"
    assert session.pushes[1].users == ("c",)


def test_push_copies_user_list():
    session = MemorySession("1001")
    users = ["a"]
    session.push(users, None, "ServerMessagePush")
    users.append("b")
    assert session.pushes[0].users == ("a",)


def test_sessions_do_not_share_state():
    one = MemorySession("1")
    two = MemorySession("2")
    one.put("k", 1)
    one.push(["1"], {}, "r")
    assert two.get("k") is None
    assert two.pushes == []


def test_abstract_session_cannot_be_created():
    with pytest.raises(TypeError):
        Session()