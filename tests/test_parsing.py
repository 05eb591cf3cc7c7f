import json

import pytest

from lessons import (
    ContentType,
    GenerationRequest,
    ParseTrace,
    RecoveryPath,
    parse_domain_response,
    parse_json_response,
)
from lessons.completion import complete_record
from lessons.truncation import TRUNCATION_MARKER

NASTY_INPUTS = [
    "",
    "   \n\t ",
    "I'm sorry, I can't help with that.",
    "{",
    "}}}{{{",
    '{"title": ',
    '```json\n{"title": "T", "notes": [{"id": "1", "title": "A", "content": "a"}',
    "[1, 2, 3]",
    '{"title": null, "notes": "nope", "questions": 7, "cards": {}}',
    '{"notes": [null, 3, "text", [], {"id": ["x"]}]}',
    "# Heading only",
    "{" * 200 + "}" * 200,
]


@pytest.fixture(params=list(ContentType))
def any_request(request):
    return GenerationRequest.model_validate(
        {
            "subject": "History",
            "class": "Grade 8",
            "chapters": ["Rome"],
            "content_type": request.param,
            "question_types": {"mcq": 1},
        }
    )


@pytest.mark.parametrize("raw", NASTY_INPUTS)
def test_parse_domain_response_is_total(raw, any_request):
    record = parse_domain_response(raw, any_request)
    assert record.content_type == any_request.content_type.value
    assert record.title and record.subject and record.class_name and record.chapters
    units = record.units()
    assert units
    for unit in units:
        for value in unit.model_dump().values():
            if isinstance(value, str):
                assert value.strip()
    assert len({unit.id for unit in units}) == len(units)
    assert record.trace is not None


def test_round_trip_of_serialized_record(notes_request):
    record = complete_record(
        {"title": "T", "notes": [{"id": "1", "title": "A", "content": 'Quote " and \\ slash'}]},
        notes_request,
    )
    dumped = record.model_dump(mode="json", by_alias=True)
    trace = ParseTrace()
    assert parse_json_response(json.dumps(dumped), ContentType.notes, trace) == dumped
    assert trace.path == RecoveryPath.direct


def test_fenced_and_unfenced_parse_the_same():
    body = '{"title": "T", "notes": [{"id": "1", "title": "A", "content": "a"}]}'
    assert parse_json_response(f"```json\n{body}\n```") == parse_json_response(body)


def test_ill_shaped_object_parses_the_same_with_or_without_fences():
    assert parse_json_response('```json\n{"title": "X"}\n```') == parse_json_response('{"title": "X"}') == {"title": "X"}


def test_trailing_commas_are_tolerated():
    raw = '{"title": "T", "notes": [{"id": "1", "title": "A", "content": "a",},],}'
    assert parse_json_response(raw) == {
        "title": "T",
        "notes": [{"id": "1", "title": "A", "content": "a"}],
    }


def test_unescaped_inner_quotes_converge():
    trace = ParseTrace()
    parsed = parse_json_response('{"title": "X", "content": "He said "hi" to me"}', trace=trace)
    assert parsed["content"] == 'He said "hi" to me'
    assert 0 < trace.repair_attempts <= 5


def test_truncated_response_yields_two_sections_second_marked(notes_request):
    raw = (
        '{"title": "X", "notes": ['
        '{"id": "1", "title": "A", "content": "first"}, '
        '{"id": "2", "title": "B", "content": "cut off mid'
    )
    record = parse_domain_response(raw, notes_request)
    assert record.title == "X"
    assert len(record.notes) == 2
    assert record.notes[0].content == "first"
    assert record.notes[1].content == "cut off mid" + TRUNCATION_MARKER
    assert record.partial is True
    assert record.trace.path == RecoveryPath.truncation


def test_markdown_fallback_splits_on_headings(notes_request):
    trace = ParseTrace()
    parsed = parse_json_response("# Intro\nSome text\n\n## Details\nMore text", trace=trace)
    assert parsed["partial"] is True
    assert [(n["title"], n["content"]) for n in parsed["notes"]] == [
        ("Intro", "Some text"),
        ("Details", "More text"),
    ]
    assert trace.path == RecoveryPath.markdown

    record = parse_domain_response("# Intro\nSome text\n\n## Details\nMore text", notes_request)
    assert [n.title for n in record.notes] == ["Intro", "Details"]
    assert record.partial is True


def test_empty_input():
    trace = ParseTrace()
    assert parse_json_response("   ", trace=trace) is None
    assert trace.path == RecoveryPath.empty


def test_empty_input_gives_fully_defaulted_record(question_request):
    record = parse_domain_response("", question_request)
    assert record.trace.path == RecoveryPath.empty
    assert len(record.questions) == 3
    assert record.partial is False


def test_top_level_array_is_completed_with_request_defaults(flashcard_request):
    record = parse_domain_response('[{"front": "Cell", "back": "Unit of life"}]', flashcard_request)
    assert record.trace.path == RecoveryPath.ill_shaped
    assert record.title == "Biology - Cells, Tissues Flashcards"
    assert [(c.front, c.back) for c in record.cards] == [("Cell", "Unit of life")]


def test_top_level_array_of_notes_keeps_every_section(notes_request):
    raw = json.dumps(
        [
            {"id": "1", "title": "A", "content": "first"},
            {"id": "2", "title": "B", "content": "second, longer body"},
            {"id": "3", "title": "C", "content": "third"},
        ]
    )
    record = parse_domain_response(raw, notes_request)
    assert record.trace.path == RecoveryPath.ill_shaped
    assert [(n.id, n.title) for n in record.notes] == [("1", "A"), ("2", "B"), ("3", "C")]
    assert record.title == "Physics - Motion, Force Notes"
    assert record.partial is False
