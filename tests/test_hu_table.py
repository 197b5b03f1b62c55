import pytest

from cardrooms.hu_table import HuTable, default_table, generate_key


def _counts(key):
    return [int(ch) for ch in key]


@pytest.fixture(scope="module")
def table():
    return default_table()


def test_generate_key_source_example():
    assert generate_key([3, 2, 1, 1, 1, 0, 0, 3, 3]) == "321110033"


def test_generate_key_rejects_out_of_range():
    with pytest.raises(ValueError):
        generate_key([5, 0, 0])
    with pytest.raises(ValueError):
        generate_key([-1])


@pytest.mark.parametrize("key", ["321110033", "301221020"])
def test_source_winning_patterns(table, key):
    assert table.find(_counts(key), 0, False) is True


def test_round_trip_key(table):
    key = "311030000"
    assert generate_key(_counts(key)) == key
    assert table.find(_counts(key), 0, False) is True


def test_sequences_not_allowed_in_honours(table):
    counts = _counts("111000000")
    assert table.find(counts, 0, False) is True
    assert table.find(counts, 0, True) is False


def test_honours_use_only_seven_ranks(table):
    counts = _counts("000000030")
    assert table.find(counts, 0, False) is True
    assert table.find(counts, 0, True) is False


def test_wild_fills_gap(table):
    counts = _counts("310100000")
    assert table.find(counts, 0, False) is False
    assert table.find(counts, 1, False) is True


def test_unknown_wild_count_not_found(table):
    assert table.find(_counts("300000000"), 9, False) is False


def test_find_rejects_bad_counts(table):
    with pytest.raises(ValueError):
        table.find([5, 0, 0, 0, 0, 0, 0, 0, 0], 0, False)
    with pytest.raises(ValueError):
        table.find([1, 1], 0, False)


def test_default_table_is_shared():
    first = default_table()
    assert first.find(_counts("321110033"), 0, False) is True
    assert first.find(_counts("310100000"), 0, False) is False
    second = default_table()
    assert second is first


def test_fresh_table_agrees_with_default(table):
    fresh = HuTable()
    for key in ("321110033", "301221020", "310100000", "111000000"):
        for gui in (0, 1, 2):
            for feng in (False, True):
                assert fresh.find(_counts(key), gui, feng) == table.find(
                    _counts(key), gui, feng
                )