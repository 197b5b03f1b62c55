import pytest

from cardrooms.sanzhang_logic import (
    CardsType,
    SanZhangLogic,
    card_color,
    card_number,
    card_value,
    card_values,
    cards_type,
    compare_cards,
    dui_zi,
)


@pytest.mark.parametrize(
    "cards, expected",
    [
        ([0x01, 0x11, 0x21], CardsType.BAO_ZI),
        ([0x02, 0x03, 0x04], CardsType.SHUN_JIN),
        ([0x02, 0x13, 0x01], CardsType.SHUN_ZI),
        ([0x02, 0x05, 0x09], CardsType.JIN_HUA),
        ([0x02, 0x12, 0x05], CardsType.DUI_ZI),
        ([0x02, 0x15, 0x29], CardsType.DAN_ZHANG),
    ],
)
def test_cards_type(cards, expected):
    assert cards_type(cards) == expected


def test_cards_type_needs_three_cards():
    with pytest.raises(ValueError):
        cards_type([0x01, 0x02])


def test_ace_is_high_value():
    assert card_number(0x31) == 1
    assert card_value(0x31) == 14
    assert card_value(0x3D) == card_number(0x3D)


def test_card_values_sorted():
    values = card_values([0x1D, 0x01, 0x22])
    assert values == sorted(values)
    assert values[-1] == card_value(0x01)


def test_card_color():
    assert card_color(0x05) == card_color(0x0D)
    assert card_color(0x05) != card_color(0x15)
    assert card_color(0x00) == ""
    assert card_color(0x3E) == ""


@pytest.mark.parametrize(
    "cards, pair, single",
    [([0x05, 0x15, 0x03], 5, 3), ([0x03, 0x13, 0x09], 3, 9)],
)
def test_dui_zi(cards, pair, single):
    assert dui_zi(cards) == (pair, single)


def test_compare_is_antisymmetric():
    hands = [
        [0x01, 0x11, 0x21],
        [0x02, 0x03, 0x04],
        [0x02, 0x13, 0x01],
        [0x02, 0x05, 0x09],
        [0x02, 0x12, 0x05],
        [0x02, 0x15, 0x29],
        [0x0D, 0x1C, 0x25],
    ]
    for a in hands:
        for b in hands:
            assert compare_cards(a, b) == -compare_cards(b, a)


def test_higher_category_wins():
    assert compare_cards([0x01, 0x11, 0x21], [0x02, 0x12, 0x05]) > 0
    assert compare_cards([0x02, 0x15, 0x29], [0x02, 0x03, 0x04]) < 0


def test_pair_comparison():
    assert compare_cards([0x05, 0x15, 0x02], [0x04, 0x14, 0x0D]) > 0
    assert compare_cards([0x05, 0x15, 0x02], [0x25, 0x35, 0x03]) < 0


def test_same_ranks_tie():
    assert compare_cards([0x02, 0x15, 0x29], [0x12, 0x25, 0x09]) == 0


def test_logic_compare_matches_function():
    logic = SanZhangLogic()
    a, b = [0x02, 0x15, 0x29], [0x0D, 0x1C, 0x25]
    assert logic.compare_cards(a, b) == compare_cards(a, b)


def test_wash_and_deal():
    logic = SanZhangLogic()
    logic.wash_cards()
    dealt = []
    for _ in range(17):
        hand = logic.get_cards()
        assert len(hand) == 3
        dealt.extend(hand)
    assert len(set(dealt)) == len(dealt)
    assert all(1 <= card_number(c) <= 13 for c in dealt)
    assert {card_color(c) for c in dealt} == {card_color(s) for s in (0x01, 0x11, 0x21, 0x31)}


def test_deal_from_exhausted_deck_raises():
    logic = SanZhangLogic()
    with pytest.raises(ValueError):
        logic.get_cards()
    logic.wash_cards()
    for _ in range(17):
        logic.get_cards()
    with pytest.raises(ValueError):
        logic.get_cards()