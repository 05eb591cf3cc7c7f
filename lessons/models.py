from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .types import ContentType, FlashcardKind, NoteLayout, RecoveryPath


class GenerationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject: str
    class_name: str = Field(alias="class")
    content_type: ContentType = ContentType.notes
    chapters: list[str] = []
    book: str | None = None
    title: str | None = None
    user_id: str | None = None
    additional_instructions: str = ""

    note_type: str = "detailed"
    layout: NoteLayout = NoteLayout.one_column
    include_definitions: bool = True
    include_theorems: bool = False
    include_formulas: bool = False
    include_key_points: bool = True
    include_summaries: bool = True
    include_discussion_questions: bool = False

    difficulty: str = "medium"
    include_answers: bool = True
    question_types: dict[str, int] = {}

    flashcard_type: str = "concept-wise"


class ParseTrace(BaseModel):
    """Which recovery path produced a record, and what had to be filled in."""

    path: RecoveryPath = RecoveryPath.empty
    repair_attempts: int = 0
    truncated: bool = False
    events: list[str] = []
    defaulted_fields: list[str] = []

    def note(self, event: str):
        self.events.append(event)


class Note(BaseModel):
    id: str
    title: str
    content: str


StructuredSection = Note


class Question(BaseModel):
    id: str
    type: str
    question: str
    options: list[str] | None = None
    answer: str | None = None
    explanation: str | None = None


class Flashcard(BaseModel):
    id: str
    front: str
    back: str
    type: FlashcardKind = FlashcardKind.concept


class LessonRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    subject: str
    class_name: str = Field(alias="class")
    chapters: list[str]
    book: str | None = None
    user_id: str | None = None
    partial: bool = False
    created_at: datetime
    trace: ParseTrace | None = Field(default=None, exclude=True)


class NotesSet(LessonRecord):
    content_type: Literal["notes"] = "notes"
    type: str
    layout: NoteLayout
    notes: list[Note]

    def units(self) -> list[Note]:
        return self.notes


class QuestionSet(LessonRecord):
    content_type: Literal["question-set"] = "question-set"
    difficulty: str
    include_answers: bool
    questions: list[Question]

    def units(self) -> list[Question]:
        return self.questions


class FlashcardSet(LessonRecord):
    content_type: Literal["flashcards"] = "flashcards"
    type: str
    cards: list[Flashcard]

    def units(self) -> list[Flashcard]:
        return self.cards


DomainRecord = Annotated[
    Union[NotesSet, QuestionSet, FlashcardSet],
    Field(discriminator="content_type"),
]
