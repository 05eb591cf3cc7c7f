import json

import pytest

from lessons.normalize import (
    normalize_json_text,
    normalize_single_quotes,
    remove_control_characters,
    strip_code_fences,
)

SAMPLES = [
    '```json\n{"title": "A", "notes": [],}\n```',
    "{'title': 'Bob\\'s notes', notes: [{'id': 1}]}",
    'Here you go: {"title": "Q", "content": "line1\nline2\tx"}',
    "\ufeffjson\n{\"title\": \u201cCurly\u201d}",
    '{"title": "Code", "content": "```python\\nprint(1)\\n```"}',
]


@pytest.mark.parametrize("raw", SAMPLES)
def test_normalization_is_idempotent(raw):
    once = normalize_json_text(raw)
    assert normalize_json_text(once) == once


def test_strip_code_fences_unwraps_json_block():
    raw = '```json\n{"title": "A"}\n```'
    assert strip_code_fences(raw) == '{"title": "A"}'


def test_strip_code_fences_prefers_longest_json_block():
    raw = 'First:\n```json\n{"a": 1}\n```\nThen:\n```json\n{"title": "Longer", "b": 2}\n```'
    assert strip_code_fences(raw) == '{"title": "Longer", "b": 2}'


def test_strip_code_fences_drops_unterminated_opening_fence():
    raw = '```json\n{"title": "A", "notes": ['
    assert strip_code_fences(raw) == '{"title": "A", "notes": ['


def test_strip_code_fences_leaves_fences_inside_values_alone():
    raw = '{"content": "```js\\nx()\\n```"}'
    assert strip_code_fences(raw) == raw


def test_trailing_commas_are_removed_outside_strings():
    raw = '{"title": "a, b,]", "notes": [1, 2,],}'
    assert json.loads(normalize_json_text(raw)) == {"title": "a, b,]", "notes": [1, 2]}


def test_control_characters_inside_strings_are_escaped():
    raw = '{"content": "one\ntwo\x07"}\n'
    assert remove_control_characters(raw) == '{"content": "one\\ntwo"}\n'


def test_single_quotes_rewritten_but_apostrophes_in_strings_kept():
    assert normalize_single_quotes("{'a': 'it'}") == '{"a": "it"}'
    assert normalize_single_quotes('{"a": "it\'s"}') == '{"a": "it\'s"}'


def test_bare_keys_and_comments_are_repaired():
    raw = '{\n  // generated\n  title: "T",\n  notes: []\n}'
    assert json.loads(normalize_json_text(raw)) == {"title": "T", "notes": []}


def test_prose_preamble_is_preserved():
    raw = 'Sure, here it is: {"title": "T"}'
    assert normalize_json_text(raw) == raw


def test_bom_label_and_curly_quotes_are_cleaned():
    assert json.loads(normalize_json_text(SAMPLES[3])) == {"title": "Curly"}
