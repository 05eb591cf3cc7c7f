import json

import pytest

from lessons.repair import is_truncation_error, locate_error_position, repair_at_position


def _error(text: str) -> json.JSONDecodeError:
    with pytest.raises(json.JSONDecodeError) as exc:
        json.loads(text)
    return exc.value


def test_repair_escapes_quote():
    assert repair_at_position('ab"c', 2) == 'ab\\"c'


def test_repair_replaces_markdown_emphasis_with_space():
    assert repair_at_position("a*b", 1) == "a b"
    assert repair_at_position("a_b", 1) == "a b"


def test_repair_doubles_stray_backslash():
    assert repair_at_position("a\\qb", 1) == "a\\\\qb"


def test_repair_drops_backslash_before_legal_escape():
    assert repair_at_position("a\\nb", 1) == "anb"


def test_repair_deletes_other_characters():
    assert repair_at_position("a;b", 1) == "ab"


@pytest.mark.parametrize("position", [-1, 3, 100])
def test_repair_out_of_range_is_a_no_op(position):
    assert repair_at_position("abc", position) == "abc"


def test_locate_error_position_moves_back_to_inner_quote():
    content = '{"a": "x "y" z"}'
    assert locate_error_position(content, _error(content)) == 9


def test_locate_error_position_keeps_other_errors():
    content = '{"a" 1}'
    err = _error(content)
    assert locate_error_position(content, err) == err.pos


def test_is_truncation_error():
    for text in ('{"a": "xyz', '{"a": 1'):
        assert is_truncation_error(text, _error(text))
    text = '{"a" 1}'
    assert not is_truncation_error(text, _error(text))


def test_missing_colon_is_not_moved_onto_the_key_quote():
    content = '{"title" "X"}'
    err = _error(content)
    assert locate_error_position(content, err) == err.pos
