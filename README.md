# cardrooms

This package holds the game-room logic for multiplayer card tables. It has no
dependencies outside the standard library.

- **Hong Zhong (red-dragon) mahjong.** It provides the tile set (`cardrooms.tiles.Tile`)
  and a precomputed lookup table for winning-hand ("hu") detection with wild tiles
  (`cardrooms.hu_table.HuTable`, `cardrooms.hu.HuLogic`). It also handles the wall
  (`cardrooms.mahjong_logic.MahjongLogic`) and the full turn flow in
  `cardrooms.mahjong_game.MahjongGame`: dealing, drawing, discarding, pong, kong,
  winning, and per-seat turn timers.
- **San Zhang (three-card poker).** It provides the deck and hand ranking in
  `cardrooms.sanzhang_logic`: `cards_type`, `compare_cards` and `SanZhangLogic`.
  The betting, look, showdown and fold flow is in `cardrooms.sanzhang_game.SanZhangGame`.
- **Rooms and unions.** `cardrooms.room.Room` covers seating, ready checks, idle-kick
  timers and dismissal votes. `cardrooms.union.Union` and `cardrooms.union.UnionManager`
  hand out six-digit room ids that are unique across every union.
- **Wire payloads.** The dataclasses and push builders in `cardrooms.mahjong_proto`,
  `cardrooms.sanzhang_proto` and `cardrooms.room_proto` produce plain dicts that are
  ready for JSON.

## Installation

```
pip install cardrooms
```

## Checking a winning hand

```python
from cardrooms.hu import HuLogic
from cardrooms.hu_table import default_table
from cardrooms.tiles import Tile

hu = HuLogic(default_table())
hand = [Tile.WAN1, Tile.WAN1, Tile.WAN1, Tile.WAN2, Tile.WAN3,
        Tile.WAN5, Tile.WAN5, Tile.WAN5, Tile.TONG1, Tile.TONG1,
        Tile.TONG1, Tile.ZHONG, Tile.TONG4]
print(hu.check_hu(hand, [Tile.ZHONG], Tile.TONG2))
```

The tiles in the second argument are wild. The third argument is added to the hand
when it is a real tile (1–35) and the hand holds fewer than 14 tiles. `default_table()`
builds the table on first use and shares it from then on.

## Comparing three-card hands

```python
from cardrooms.sanzhang_logic import cards_type, compare_cards

print(cards_type([0x01, 0x11, 0x21]))                           # CardsType.BAO_ZI
print(compare_cards([0x01, 0x11, 0x21], [0x0d, 0x1d, 0x2d]))    # > 0: first hand wins
```

A card is encoded as `suit * 0x10 + rank`. Suits run from 0 to 3 (diamonds, clubs,
hearts, spades) and ranks run from 1 to 13, with the ace as 1. For ranking, the ace
counts as 14, and A-2-3 counts as a straight. `compare_cards` returns a positive
number when the first hand wins, a negative number when it loses, and 0 on a tie.

## Running a room

```python
from types import SimpleNamespace

from cardrooms.room import RoomMessageReq
from cardrooms.session import MemorySession
from cardrooms.union import CreateRoomReq, UnionManager

def profile(uid):
    return SimpleNamespace(uid=uid, nickname=f"player{uid}", avatar="", gold=1000,
                           sex=1, address="")

manager = UnionManager()
req = CreateRoomReq.from_json(
    '{"unionID": 1, "gameRule": {"gameType": 1, "baseScore": 1, '
    '"addScores": [1, 2, 5], "maxPlayerCount": 2, "minPlayerCount": 2}}'
)
alice = MemorySession("1001")
room = manager.get_union(req.union_id).create_room(alice, req, profile("1001"))

bob = MemorySession("1002")
manager.join_room(bob, room.room_id, profile("1002"))

ready = RoomMessageReq.from_json('{"type": 301}')
room.room_message_handle(alice, ready)
room.room_message_handle(bob, ready)   # everyone is ready: a hand starts
```

A user is any object with the attributes `uid`, `nickname`, `avatar`, `gold`, `sex`
and `address`.

The `gameType` in the rule chooses the game: 1 is three-card poker and 5 is Hong Zhong
mahjong. A mahjong room starts only when `maxPlayerCount` players are seated and ready.

Every message a room or game sends goes through the `push` method of the session that
triggered it. `MemorySession` records each one in `session.pushes`, in order, as a
`(users, data, route)` tuple. To send messages to real clients, subclass
`cardrooms.session.Session`.

Each game message from a seated user is passed to the game through
`room.game_message_handle(session, raw_json)`.

`UnionManager.join_room` raises `RoomNotExistError` for an unknown room id. The
`from_json` parsers raise `ValueError` on malformed input.

Timers run on daemon threads: the idle kick (`room.kick_delay`, 30 seconds by default),
the mahjong turn countdown, and the short delays between game phases.

## What this package does not do

This is a library with no command. It does not include:

- a network server or any client connection handling;
- user accounts, authentication or storage;
- persistence of rooms or games across restarts.

All state is kept in memory in the objects described above.

## Running the tests

```
pip install -e .[test]
pytest
```