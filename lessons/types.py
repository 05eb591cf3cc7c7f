from enum import Enum


class ContentType(str, Enum):
    notes = "notes"
    question_set = "question-set"
    flashcards = "flashcards"


class NoteLayout(str, Enum):
    one_column = "one-column"
    two_column = "two-column"


class FlashcardKind(str, Enum):
    definition = "definition"
    concept = "concept"
    formula = "formula"
    question = "question"


class RecoveryPath(str, Enum):
    empty = "empty"
    direct = "direct"
    fenced = "fenced"
    substring = "substring"
    repair = "repair"
    ill_shaped = "ill-shaped"
    truncation = "truncation"
    markdown = "markdown"


# Keys under which each content type keeps its units, preferred key first.
UNIT_KEYS: dict[ContentType, tuple[str, ...]] = {
    ContentType.notes: ("notes", "sections"),
    ContentType.question_set: ("questions",),
    ContentType.flashcards: ("cards", "flashcards"),
}

# Keys that identify a single unit object of each content type.
UNIT_FIELDS: dict[ContentType, tuple[str, ...]] = {
    ContentType.notes: ("id", "title", "content"),
    ContentType.question_set: ("id", "type", "question", "answer", "explanation"),
    ContentType.flashcards: ("id", "front", "back", "type"),
}
