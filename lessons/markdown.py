import re

from .models import Note
from .types import ContentType

GENERIC_TITLE = "Generated Content"
PREAMBLE_TITLE = "Introduction"

_HEADING = re.compile(r"^[ \t]{0,3}#{1,6}[ \t]+(.+?)(?:[ \t]+#+)?[ \t]*$", re.MULTILINE)
_BOLD_HEADING = re.compile(r"^[ \t]*\*\*([^*\n]+?)\*\*[ \t]*:?[ \t]*$", re.MULTILINE)
_CODE_BLOCK = re.compile(r"```.*?```", re.DOTALL)


def _outside_code(matches: list[re.Match], text: str) -> list[re.Match]:
    spans = [(m.start(), m.end()) for m in _CODE_BLOCK.finditer(text)]
    return [m for m in matches if not any(start <= m.start() < end for start, end in spans)]


def _split_at(text: str, matches: list[re.Match]) -> list[Note]:
    pairs: list[tuple[str, str]] = []
    preamble = text[: matches[0].start()].strip()
    if preamble:
        pairs.append((PREAMBLE_TITLE, preamble))
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        title = match.group(1).strip().strip("*_").strip()
        pairs.append((title or f"Section {len(pairs) + 1}", text[match.end():end].strip()))
    return [Note(id=str(i + 1), title=title, content=body) for i, (title, body) in enumerate(pairs)]


def split_markdown_sections(text: str) -> list[Note]:
    """Segment free text into sections at headings, then bold pseudo-headings.

    Text with neither becomes a single generic section holding it verbatim.
    """
    for pattern in (_HEADING, _BOLD_HEADING):
        matches = _outside_code(list(pattern.finditer(text)), text)
        if matches:
            return _split_at(text, matches)
    return [Note(id="1", title=GENERIC_TITLE, content=text)]


def sections_to_units(sections: list[Note], content_type: ContentType) -> list[dict]:
    if content_type == ContentType.question_set:
        units = []
        for section in sections:
            question = section.content or section.title
            if section.content and section.title not in (GENERIC_TITLE, PREAMBLE_TITLE):
                question = f"{section.title}\n\n{section.content}"
            units.append({"id": section.id, "question": question})
        return units
    if content_type == ContentType.flashcards:
        return [
            {"id": section.id, "front": section.title, "back": section.content or section.title}
            for section in sections
        ]
    return [section.model_dump() for section in sections]
