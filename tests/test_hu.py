import pytest

from cardrooms.hu import HuLogic
from cardrooms.hu_table import default_table
from cardrooms.tiles import Tile


@pytest.fixture(scope="module")
def logic():
    return HuLogic(default_table())


SOURCE_HAND = [
    Tile.WAN1, Tile.WAN1, Tile.WAN1, Tile.WAN2, Tile.WAN3, Tile.WAN5, Tile.WAN5,
    Tile.WAN5, Tile.TONG1, Tile.TONG1, Tile.TONG1, Tile.ZHONG, Tile.TONG4,
]

PLAIN_WIN = [
    Tile.WAN1, Tile.WAN2, Tile.WAN3, Tile.WAN4, Tile.WAN5, Tile.WAN6,
    Tile.WAN7, Tile.WAN8, Tile.WAN9, Tile.TONG1, Tile.TONG1, Tile.TONG1,
    Tile.TONG5, Tile.TONG5,
]


def test_source_case(logic):
    assert logic.check_hu(SOURCE_HAND, [Tile.ZHONG], Tile.TONG2) is True


def test_source_case_without_drawn_tile(logic):
    assert logic.check_hu(SOURCE_HAND, [Tile.ZHONG], 0) is False


def test_input_not_mutated(logic):
    hand = list(SOURCE_HAND)
    logic.check_hu(hand, [Tile.ZHONG], Tile.TONG2)
    assert hand == SOURCE_HAND


def test_plain_winning_hand(logic):
    assert logic.check_hu(PLAIN_WIN, [Tile.ZHONG], 0) is True


def test_full_hand_ignores_extra_card(logic):
    assert logic.check_hu(PLAIN_WIN, [Tile.ZHONG], Tile.DONG) is True


def test_scattered_hand_loses(logic):
    hand = [
        Tile.WAN1, Tile.WAN4, Tile.WAN7, Tile.TONG2, Tile.TONG5, Tile.TONG8,
        Tile.TIAO3, Tile.TIAO6, Tile.TIAO9, Tile.DONG, Tile.NAN, Tile.XI, Tile.BEI,
    ]
    assert logic.check_hu(hand, [Tile.ZHONG], Tile.WAN9) is False


def test_honour_sequence_does_not_count(logic):
    hand = [
        Tile.DONG, Tile.NAN, Tile.XI, Tile.WAN1, Tile.WAN1, Tile.WAN1,
        Tile.WAN2, Tile.WAN2, Tile.WAN2, Tile.WAN3, Tile.WAN3, Tile.WAN3,
        Tile.TONG5, Tile.TONG5,
    ]
    assert logic.check_hu(hand, [Tile.ZHONG], 0) is False
    triplet = [Tile.DONG] * 3 + hand[3:]
    assert logic.check_hu(triplet, [Tile.ZHONG], 0) is True


def test_only_wilds_form_pair(logic):
    assert logic.check_hu([Tile.ZHONG, Tile.ZHONG], [Tile.ZHONG], 0) is True


def test_wild_completes_pair(logic):
    hand = PLAIN_WIN[:-1] + [Tile.ZHONG]
    assert logic.check_hu(hand, [Tile.ZHONG], 0) is True
    assert logic.check_hu(hand, [], 0) is False


def test_invalid_tile_rejected(logic):
    with pytest.raises(ValueError):
        logic.check_hu([10, 11, 12], [Tile.ZHONG], 0)


def test_default_table_used_when_omitted():
    assert HuLogic().check_hu(SOURCE_HAND, [Tile.ZHONG], Tile.TONG2) is True