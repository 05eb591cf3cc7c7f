from pathlib import Path

from .models import GenerationRequest
from .types import ContentType, NoteLayout

PROMPTS_DIR = Path(__file__).resolve().parents[1] / "prompts"

_NOTE_STYLES = {
    "bullet-points": "Bullet Points - concise, easy-to-scan notes organized in bullet point format",
    "outline": "Outline Method - hierarchical structure with main topics and subtopics",
    "detailed": "Detailed Notes - comprehensive notes with full explanations and examples",
    "cornell": "Cornell Method - cues and questions beside the main notes with a summary at the end",
    "mind-map": "Mind Map - a central topic with related ideas branching out",
}

_QUESTION_TYPE_NAMES = {
    "mcq": "multiple choice",
    "true-false": "true/false",
    "short-answers": "short answer",
    "long-answers": "long answer",
    "fill-in-blanks": "fill in the blanks",
    "passage-based": "passage based",
}


def load_prompt(name: str) -> str:
    path = PROMPTS_DIR / f"{name}_agent.txt"
    try:
        with open(path, "r", encoding="utf-8") as file:
            return file.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Missing prompt file: prompts/{name}_agent.txt")


def prompt_name(content_type: ContentType) -> str:
    return content_type.name


def _header(request: GenerationRequest, what: str) -> str:
    chapters = ", ".join(request.chapters) or request.subject
    lines = [
        f"Create {what} for {request.class_name} students studying {request.subject}, "
        f"covering the following chapters: {chapters}.",
        f'Use "{request.subject}" as "subject" and "{request.class_name}" as "class" in the JSON.',
    ]
    if request.book:
        lines.append(f"Base the content on the book: {request.book}.")
    if request.title:
        lines.append(f'Use "{request.title}" as the title.')
    return "\n".join(lines)


def _notes_prompt(request: GenerationRequest) -> str:
    wanted = [
        (request.include_definitions, "Definitions of key terms and concepts"),
        (request.include_theorems, "Important theorems and principles"),
        (request.include_formulas, "Relevant formulas and equations"),
        (request.include_key_points, "Key points and takeaways"),
        (request.include_summaries, "Brief summaries of important topics"),
        (request.include_discussion_questions, "Discussion questions to promote critical thinking"),
    ]
    include_block = "\n".join(f"- {label}" for enabled, label in wanted if enabled)
    style = _NOTE_STYLES.get(request.note_type, request.note_type)
    layout = (
        "Single column layout"
        if request.layout == NoteLayout.one_column
        else "Two column layout with main content on the left and supplementary information on the right"
    )
    parts = [
        _header(request, "study notes"),
        f'Follow the "{style}" format.',
        f"Include:\n{include_block}" if include_block else "",
        f'Layout format: {layout}. Set "type" to "{request.note_type}" and "layout" to "{request.layout.value}".',
    ]
    if request.additional_instructions.strip():
        parts.append(f"Additional instructions: {request.additional_instructions.strip()}")
    return "\n\n".join(p for p in parts if p)


def _question_set_prompt(request: GenerationRequest) -> str:
    requested = [(qtype, count) for qtype, count in request.question_types.items() if count > 0]
    type_block = "\n".join(
        f"- {count} {_QUESTION_TYPE_NAMES.get(qtype, qtype.replace('-', ' '))} questions (type \"{qtype}\")"
        for qtype, count in requested
    ) or '- 5 short answer questions (type "short-answers")'
    answers = (
        "Include answers and explanations for each question."
        if request.include_answers
        else "Do not include answers or explanations."
    )
    parts = [
        _header(request, "a question set"),
        f"The question set should include:\n{type_block}",
        f'Difficulty level: {request.difficulty}. Set "difficulty" to "{request.difficulty}".',
        answers,
    ]
    if request.additional_instructions.strip():
        parts.append(f"Additional instructions: {request.additional_instructions.strip()}")
    return "\n\n".join(parts)


def _flashcards_prompt(request: GenerationRequest) -> str:
    if request.flashcard_type == "chapter-wise" and request.chapters:
        grouping = "Group the cards by chapter, in the order the chapters are listed."
    else:
        grouping = "Organize the cards by concept, one idea per card."
    parts = [
        _header(request, "a flashcard deck"),
        grouping,
        f'Set "type" to "{request.flashcard_type}".',
    ]
    if request.additional_instructions.strip():
        parts.append(f"Additional instructions: {request.additional_instructions.strip()}")
    return "\n\n".join(parts)


_BUILDERS = {
    ContentType.notes: _notes_prompt,
    ContentType.question_set: _question_set_prompt,
    ContentType.flashcards: _flashcards_prompt,
}


def build_prompt(request: GenerationRequest) -> str:
    base = _BUILDERS[request.content_type](request)
    return (
        f"{base}\n\n"
        "Return ONLY the JSON object described in your instructions.\n"
        "Do NOT wrap your output in markdown code fences."
    )
