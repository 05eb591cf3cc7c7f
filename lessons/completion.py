"""Turn whatever survived parsing into a fully populated record.

Every required field comes from the parsed object when it is usable, then from
the GenerationRequest, then from a generated id or a static placeholder. The
completer never rejects input.
"""

import json

import logger
from generics import new_record_id, utcnow

from .models import (
    Flashcard,
    FlashcardSet,
    GenerationRequest,
    Note,
    NotesSet,
    ParseTrace,
    Question,
    QuestionSet,
)
from .types import UNIT_KEYS, ContentType, FlashcardKind, NoteLayout, RecoveryPath

PLACEHOLDER_CONTENT = "No content available for this section."
PLACEHOLDER_BACK = "No answer available for this card."
DEFAULT_QUESTION_TYPE = "short-answers"
DEFAULT_SUBJECT = "General"


def _text(value) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, list):
        lines = [_text(item) for item in value]
        joined = "\n".join(line for line in lines if line)
        return joined or None
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)
    return None


def _first_text(item: dict, *keys: str) -> str | None:
    for key in keys:
        value = _text(item.get(key))
        if value:
            return value
    return None


class _IdAllocator:
    def __init__(self):
        self.used: set[str] = set()

    def claim(self, value, index: int) -> tuple[str, bool]:
        candidate = _text(value) if not isinstance(value, (list, dict)) else None
        generated = candidate is None or candidate in self.used
        if generated:
            candidate = str(index + 1)
            if candidate in self.used:
                candidate = new_record_id()
        self.used.add(candidate)
        return candidate, generated


def _defaulted(trace: ParseTrace, field: str, value):
    trace.defaulted_fields.append(field)
    return value


def _unit_list(data: dict, content_type: ContentType) -> list | None:
    for key in UNIT_KEYS[content_type]:
        value = data.get(key)
        if isinstance(value, list) and value:
            return value
    return None


def _header(data: dict, request: GenerationRequest, trace: ParseTrace) -> dict:
    subject = _text(data.get("subject")) or _defaulted(
        trace, "subject", request.subject.strip() or DEFAULT_SUBJECT
    )
    class_name = _first_text(data, "class", "class_name") or _defaulted(
        trace, "class", request.class_name.strip() or DEFAULT_SUBJECT
    )
    chapters = None
    raw_chapters = data.get("chapters")
    if isinstance(raw_chapters, list):
        chapters = [c for c in (_text(ch) for ch in raw_chapters if not isinstance(ch, (list, dict))) if c]
    elif isinstance(raw_chapters, str) and raw_chapters.strip():
        chapters = [raw_chapters.strip()]
    if not chapters:
        defaults = [c.strip() for c in request.chapters if c and c.strip()]
        chapters = _defaulted(trace, "chapters", defaults or [subject])
    return {
        "subject": subject,
        "class_name": class_name,
        "chapters": chapters,
        "book": _text(data.get("book")) or request.book,
        "user_id": request.user_id,
    }


def _title(data: dict, request: GenerationRequest, trace: ParseTrace, fallback: str) -> str:
    return _text(data.get("title")) or _defaulted(trace, "title", (request.title or "").strip() or fallback)


def _is_partial(data: dict, trace: ParseTrace) -> bool:
    return data.get("partial") is True or trace.path in (RecoveryPath.truncation, RecoveryPath.markdown)


# --------------------
# Notes
# --------------------
def default_notes(request: GenerationRequest) -> list[Note]:
    chapters = ", ".join(request.chapters) or request.subject
    return [
        Note(
            id="1",
            title="Introduction",
            content=f"# Introduction to {request.subject}\n\nThis section provides an overview of the key concepts covered in {chapters}.",
        ),
        Note(
            id="2",
            title="Key Concepts",
            content="## Key Concepts\n\n- Concept 1: Description of concept 1\n- Concept 2: Description of concept 2\n- Concept 3: Description of concept 3",
        ),
        Note(
            id="3",
            title="Definitions",
            content="## Important Definitions\n\n**Term 1**: Definition of term 1\n\n**Term 2**: Definition of term 2",
        ),
        Note(
            id="4",
            title="Summary",
            content="## Summary\n\nThis section summarizes the key points covered in the notes.",
        ),
    ]


def _complete_notes(data: dict, request: GenerationRequest, trace: ParseTrace) -> NotesSet:
    header = _header(data, request, trace)
    title = _title(data, request, trace, f"{header['subject']} - {', '.join(header['chapters'])} Notes")

    raw_units = _unit_list(data, ContentType.notes)
    if raw_units is None and _text(data.get("content")):
        raw_units = [{"title": title, "content": data["content"]}]

    ids = _IdAllocator()
    notes: list[Note] = []
    for index, item in enumerate(raw_units or []):
        if isinstance(item, str):
            item = {"content": item}
        if not isinstance(item, dict):
            trace.note(f"completion: dropped note {index} of type {type(item).__name__}")
            continue
        section_title = _first_text(item, "title", "heading")
        content = _first_text(item, "content", "body", "text")
        if not section_title and not content:
            trace.note(f"completion: dropped empty note {index}")
            continue
        position = len(notes)
        note_id, generated = ids.claim(item.get("id"), position)
        if generated:
            trace.defaulted_fields.append(f"notes[{position}].id")
        notes.append(
            Note(
                id=note_id,
                title=section_title or _defaulted(trace, f"notes[{position}].title", f"Section {position + 1}"),
                content=content or _defaulted(trace, f"notes[{position}].content", PLACEHOLDER_CONTENT),
            )
        )
    if not notes:
        notes = _defaulted(trace, "notes", default_notes(request))

    layout = data.get("layout")
    if layout not in {item.value for item in NoteLayout}:
        layout = _defaulted(trace, "layout", request.layout)

    return NotesSet(
        **header,
        title=title,
        type=_text(data.get("type")) or _defaulted(trace, "type", request.note_type),
        layout=layout,
        notes=notes,
        partial=_is_partial(data, trace),
        created_at=utcnow(),
        trace=trace,
    )


# --------------------
# Question sets
# --------------------
def _requested_types(request: GenerationRequest) -> list[tuple[str, int]]:
    return [(qtype, count) for qtype, count in request.question_types.items() if count > 0]


def default_questions(request: GenerationRequest) -> list[Question]:
    chapters = ", ".join(request.chapters) or request.subject
    questions: list[Question] = []
    for qtype, count in _requested_types(request) or [(DEFAULT_QUESTION_TYPE, 1)]:
        for i in range(count):
            questions.append(
                Question(
                    id=str(len(questions) + 1),
                    type=qtype,
                    question=f"Placeholder {qtype} question {i + 1} on {chapters}",
                    options=["Option A", "Option B", "Option C", "Option D"] if qtype == "mcq" else None,
                    answer="Default answer" if request.include_answers else None,
                    explanation="Default explanation" if request.include_answers else None,
                )
            )
    return questions


def _options(value) -> list[str] | None:
    if isinstance(value, dict):
        value = list(value.values())
    if not isinstance(value, list):
        return None
    options = [text for text in (_text(option) for option in value) if text]
    return options or None


def _complete_question_set(data: dict, request: GenerationRequest, trace: ParseTrace) -> QuestionSet:
    header = _header(data, request, trace)
    title = _title(data, request, trace, f"{header['subject']} Question Set: {', '.join(header['chapters'])}")
    include_answers = request.include_answers
    reported = data.get("include_answers", data.get("includeAnswers"))
    if isinstance(reported, bool) and reported != include_answers:
        trace.note("completion: response disagreed with include_answers, request wins")
    requested = _requested_types(request)
    fallback_type = requested[0][0] if requested else DEFAULT_QUESTION_TYPE

    raw_units = _unit_list(data, ContentType.question_set)
    if raw_units is None and _text(data.get("content")):
        raw_units = [{"question": data["content"]}]

    ids = _IdAllocator()
    questions: list[Question] = []
    for index, item in enumerate(raw_units or []):
        if isinstance(item, str):
            item = {"question": item}
        if not isinstance(item, dict):
            trace.note(f"completion: dropped question {index} of type {type(item).__name__}")
            continue
        text = _first_text(item, "question", "text", "prompt", "statement")
        answer = _first_text(item, "answer", "correct_answer", "correctAnswer")
        if not text and not answer:
            trace.note(f"completion: dropped empty question {index}")
            continue
        position = len(questions)
        question_id, generated = ids.claim(item.get("id"), position)
        if generated:
            trace.defaulted_fields.append(f"questions[{position}].id")
        questions.append(
            Question(
                id=question_id,
                type=_text(item.get("type")) or _defaulted(trace, f"questions[{position}].type", fallback_type),
                question=text
                or _defaulted(trace, f"questions[{position}].question", f"Question {position + 1} (text unavailable)"),
                options=_options(item.get("options")),
                answer=answer if include_answers else None,
                explanation=_first_text(item, "explanation", "solution") if include_answers else None,
            )
        )
    if not questions:
        questions = _defaulted(trace, "questions", default_questions(request))

    return QuestionSet(
        **header,
        title=title,
        difficulty=_text(data.get("difficulty")) or _defaulted(trace, "difficulty", request.difficulty),
        include_answers=include_answers,
        questions=questions,
        partial=_is_partial(data, trace),
        created_at=utcnow(),
        trace=trace,
    )


# --------------------
# Flashcards
# --------------------
def default_cards(request: GenerationRequest) -> list[Flashcard]:
    topics = [c for c in request.chapters if c and c.strip()] or [request.subject or DEFAULT_SUBJECT]
    return [
        Flashcard(
            id=str(i + 1),
            front=f"Key ideas in {topic}",
            back=f"Review the main concepts, definitions and formulas covered in {topic}.",
            type=FlashcardKind.concept,
        )
        for i, topic in enumerate(topics)
    ]


def _card_kind(value) -> FlashcardKind:
    text = (_text(value) or "").lower()
    try:
        return FlashcardKind(text)
    except ValueError:
        return FlashcardKind.concept


def _complete_flashcards(data: dict, request: GenerationRequest, trace: ParseTrace) -> FlashcardSet:
    header = _header(data, request, trace)
    title = _title(data, request, trace, f"{header['subject']} - {', '.join(header['chapters'])} Flashcards")

    raw_units = _unit_list(data, ContentType.flashcards)
    if raw_units is None and _text(data.get("content")):
        raw_units = [{"front": title, "back": data["content"]}]

    ids = _IdAllocator()
    cards: list[Flashcard] = []
    for index, item in enumerate(raw_units or []):
        if not isinstance(item, dict):
            trace.note(f"completion: dropped card {index} of type {type(item).__name__}")
            continue
        front = _first_text(item, "front", "term", "question", "title")
        back = _first_text(item, "back", "definition", "answer", "content")
        if not front and not back:
            trace.note(f"completion: dropped empty card {index}")
            continue
        position = len(cards)
        card_id, generated = ids.claim(item.get("id"), position)
        if generated:
            trace.defaulted_fields.append(f"cards[{position}].id")
        cards.append(
            Flashcard(
                id=card_id,
                front=front or _defaulted(trace, f"cards[{position}].front", f"Card {position + 1}"),
                back=back or _defaulted(trace, f"cards[{position}].back", PLACEHOLDER_BACK),
                type=_card_kind(item.get("type")),
            )
        )
    if not cards:
        cards = _defaulted(trace, "cards", default_cards(request))

    return FlashcardSet(
        **header,
        title=title,
        type=_text(data.get("type")) or _defaulted(trace, "type", request.flashcard_type),
        cards=cards,
        partial=_is_partial(data, trace),
        created_at=utcnow(),
        trace=trace,
    )


_COMPLETERS = {
    ContentType.notes: _complete_notes,
    ContentType.question_set: _complete_question_set,
    ContentType.flashcards: _complete_flashcards,
}


def complete_record(parsed, request: GenerationRequest, trace: ParseTrace | None = None):
    trace = trace if trace is not None else ParseTrace()
    data = parsed if isinstance(parsed, dict) else {}
    record = _COMPLETERS[request.content_type](data, request, trace)
    if trace.defaulted_fields:
        logger.saveToLog(
            f"[complete_record] Filled {len(trace.defaulted_fields)} field(s) from defaults: "
            f"{', '.join(trace.defaulted_fields[:10])}",
            "DEBUG",
        )
    return record
