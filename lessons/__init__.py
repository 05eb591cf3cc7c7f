from .completion import complete_record
from .generation import generate_content
from .models import (
    DomainRecord,
    Flashcard,
    FlashcardSet,
    GenerationRequest,
    Note,
    NotesSet,
    ParseTrace,
    Question,
    QuestionSet,
    StructuredSection,
)
from .parsing import normalize_json_text, parse_domain_response, parse_json_response, repair_at_position
from .types import ContentType, FlashcardKind, NoteLayout, RecoveryPath

__all__ = [
    "ContentType",
    "DomainRecord",
    "Flashcard",
    "FlashcardKind",
    "FlashcardSet",
    "GenerationRequest",
    "Note",
    "NoteLayout",
    "NotesSet",
    "ParseTrace",
    "Question",
    "QuestionSet",
    "RecoveryPath",
    "StructuredSection",
    "complete_record",
    "generate_content",
    "normalize_json_text",
    "parse_domain_response",
    "parse_json_response",
    "repair_at_position",
]
