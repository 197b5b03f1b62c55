"""Client sessions and the interfaces that rooms, unions and games offer each other."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Mapping, NamedTuple, Protocol

if TYPE_CHECKING:
    from cardrooms.room_proto import RoomUser


class Session(ABC):
    """A connected client: its user id, a small key-value store, and a push channel."""

    @property
    @abstractmethod
    def uid(self) -> str:
        """Id of the user behind the session; empty when not logged in."""

    @abstractmethod
    def get(self, key: str) -> Any:
        """The value stored under key, or None."""

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """Store a value under key."""

    @abstractmethod
    def push(self, users: Iterable[str], data: Any, route: str) -> None:
        """Send data to the given users along the given route."""


class _PushRecord(NamedTuple):
    users: tuple[str, ...]
    data: Any
    route: str


class MemorySession(Session):
    """A session that keeps its store in memory and records every push."""

    def __init__(self, uid: str) -> None:
        self._uid = uid
        self._store: dict[str, Any] = {}
        self.pushes: list[_PushRecord] = []

    @property
    def uid(self) -> str:
        return self._uid

    def get(self, key: str) -> Any:
        return self._store.get(key)

    def put(self, key: str, value: Any) -> None:
        self._store[key] = value

    def push(self, users: Iterable[str], data: Any, route: str) -> None:
        self.pushes.append(_PushRecord(tuple(users), data, route))


class RoomFrame(Protocol):
    """What a game sees of the room it runs in."""

    @property
    def room_id(self) -> str:
        """Id of the room."""
        ...

    @property
    def users(self) -> Mapping[str, RoomUser]:
        """Seated users by uid."""
        ...

    def end_game(self, session: Session) -> None:
        """Mark the current hand over."""
        ...

    def user_ready(self, uid: str, session: Session) -> None:
        """Mark a user ready for the next hand."""
        ...


class UnionBase(Protocol):
    """What a room sees of the union that holds it."""

    def dismiss_room(self, room_id: str) -> None:
        """Forget a room."""
        ...


class GameFrame(Protocol):
    """A game played in a room."""

    def game_data(self, session: Session) -> Any:
        """The table state as the session's user may see it."""
        ...

    def start_game(self, session: Session, user: RoomUser) -> None:
        """Start a hand."""
        ...

    def handle_message(self, user: RoomUser, session: Session, msg: bytes | str) -> None:
        """Act on a game message from a seated user."""
        ...