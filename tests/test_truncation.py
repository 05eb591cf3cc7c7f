from lessons.models import ParseTrace
from lessons.truncation import (
    TRUNCATION_MARKER,
    looks_truncated,
    recover_truncated,
    salvage_partial_unit,
)
from lessons.types import ContentType, RecoveryPath

CUT_NOTES = (
    '{"title": "X", "notes": ['
    '{"id": "1", "title": "A", "content": "complete"}, '
    '{"id": "2", "title": "B", "content": "cut off mid'
)


def test_looks_truncated():
    assert looks_truncated(CUT_NOTES)
    assert looks_truncated('{"title": "X", "notes": [{"id": "1"}')
    assert not looks_truncated('{"title": "X", "notes": []}')
    assert not looks_truncated("plain prose without braces")


def test_recover_keeps_complete_units_and_marks_the_partial_one():
    trace = ParseTrace()
    record = recover_truncated(CUT_NOTES, ContentType.notes, trace)
    assert record["partial"] is True
    assert record["title"] == "X"
    assert [n["id"] for n in record["notes"]] == ["1", "2"]
    assert record["notes"][0] == {"id": "1", "title": "A", "content": "complete"}
    second = record["notes"][1]
    assert second["content"] == "cut off mid" + TRUNCATION_MARKER
    assert second["partial"] is True
    assert trace.truncated
    assert trace.path == RecoveryPath.truncation


def test_salvage_marks_the_field_that_was_cut():
    unit = salvage_partial_unit('{"id": "3", "type": "mcq", "question": "What is', ContentType.question_set)
    assert unit["id"] == "3"
    assert unit["type"] == "mcq"
    assert unit["question"] == "What is" + TRUNCATION_MARKER


def test_salvage_marks_last_field_when_cut_between_fields():
    unit = salvage_partial_unit('{"id": "1", "front": "Cell", "back": "Unit of life"', ContentType.flashcards)
    assert unit["front"] == "Cell"
    assert unit["back"] == "Unit of life" + TRUNCATION_MARKER


def test_salvage_keeps_options_seen_so_far():
    fragment = '{"id": "1", "type": "mcq", "question": "Pick", "options": ["A", "B", "C'
    unit = salvage_partial_unit(fragment, ContentType.question_set)
    assert unit["options"] == ["A", "B"]


def test_salvage_returns_none_without_unit_fields():
    assert salvage_partial_unit('{"foo": "bar', ContentType.flashcards) is None


def test_recover_question_set_with_escaped_quotes():
    text = (
        '{"title": "Quiz", "questions": ['
        '{"id": "1", "type": "short-answers", "question": "Define \\"force\\"", "answer": "A push"}, '
        '{"id": "2", "type": "short-answers", "question": "Define mass", "answer": "Amount of'
    )
    record = recover_truncated(text, ContentType.question_set)
    questions = record["questions"]
    assert questions[0]["question"] == 'Define "force"'
    assert questions[1]["answer"] == "Amount of" + TRUNCATION_MARKER


def test_recover_without_units_falls_back_to_markdown():
    trace = ParseTrace()
    record = recover_truncated('{"title": "Deck", "cards": [', ContentType.flashcards, trace)
    assert trace.path == RecoveryPath.markdown
    assert record["title"] == "Deck"
    assert len(record["cards"]) == 1


def test_complete_top_level_array_is_not_truncated():
    assert not looks_truncated('[{"front": "Cell", "back": "Unit of life"}]')
    assert not looks_truncated("  [1, 2, 3]  ")
    assert looks_truncated('[{"front": "Cell", "back": "Unit of')
