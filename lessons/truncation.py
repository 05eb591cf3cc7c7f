"""Salvage records from responses that were cut off mid-stream.

Length-limited completions usually stop inside the unit array. Every unit
object that did close is kept as parsed; the one that was being written when
the output stopped is rebuilt from its string fields and marked incomplete.
"""

import json
import re

import logger
from config import get_settings

from .markdown import sections_to_units, split_markdown_sections
from .models import ParseTrace
from .normalize import strip_code_fences
from .scanner import find_object_end, has_unbalanced_structure, object_starts
from .types import UNIT_FIELDS, UNIT_KEYS, ContentType, RecoveryPath

TRUNCATION_MARKER = "\n\n[Incomplete: the response was cut off before this section finished.]"

# Fields that identify a unit object, beyond a bare id.
_CORE_FIELDS: dict[ContentType, tuple[str, ...]] = {
    ContentType.notes: ("title", "content"),
    ContentType.question_set: ("question",),
    ContentType.flashcards: ("front", "back", "term", "definition"),
}

# Where the marker goes when the cut fell between fields, most specific first.
_MARK_FIELDS: dict[ContentType, tuple[str, ...]] = {
    ContentType.notes: ("content",),
    ContentType.question_set: ("explanation", "answer", "question"),
    ContentType.flashcards: ("back", "front"),
}

_STRING_ITEM = re.compile(r'"((?:[^"\\]|\\.)*)"', re.DOTALL)


def looks_truncated(text: str, max_depth: int = 64) -> bool:
    start = 0 if text.lstrip().startswith("[") else text.find("{")
    if start == -1:
        return False
    body = text[start:].strip()
    if not body:
        return False
    if body[-1] not in "}]":
        return find_object_end(body, 0, max_depth) == -1
    return has_unbalanced_structure(body)


def _is_unit(obj, content_type: ContentType) -> bool:
    if not isinstance(obj, dict):
        return False
    if any(key in obj for key in UNIT_KEYS[content_type]):
        return False
    return any(key in obj for key in _CORE_FIELDS[content_type])


def _decode(fragment: str) -> str:
    try:
        return json.loads(f'"{fragment}"')
    except json.JSONDecodeError:
        return fragment


def _string_field(fragment: str, name: str) -> tuple[str | None, bool]:
    """Return ``(value, cut)``; ``cut`` is True when the string never closed."""
    match = re.search(rf'"{re.escape(name)}"\s*:\s*"((?:[^"\\]|\\.)*)(")?', fragment, re.DOTALL)
    if match:
        return _decode(match.group(1)), match.group(2) is None
    number = re.search(rf'"{re.escape(name)}"\s*:\s*(-?\d+)', fragment)
    if number:
        return number.group(1), False
    return None, False


def _salvage_options(fragment: str) -> list[str] | None:
    match = re.search(r'"options"\s*:\s*\[', fragment)
    if not match:
        return None
    rest = fragment[match.end():]
    close = rest.find("]")
    items = _STRING_ITEM.findall(rest if close == -1 else rest[:close])
    return [_decode(item) for item in items] or None


def salvage_partial_unit(fragment: str, content_type: ContentType) -> dict | None:
    """Rebuild the unit an unclosed ``{`` was starting, marking the cut field."""
    unit: dict = {}
    cut_field = None
    for name in UNIT_FIELDS[content_type]:
        value, cut = _string_field(fragment, name)
        if value is None:
            continue
        unit[name] = value
        if cut:
            cut_field = name
    if not unit:
        return None
    if content_type == ContentType.question_set:
        options = _salvage_options(fragment)
        if options:
            unit["options"] = options
    if cut_field is None:
        present = [name for name in _MARK_FIELDS[content_type] if unit.get(name)]
        cut_field = present[0] if present else _MARK_FIELDS[content_type][-1]
    unit[cut_field] = f"{unit.get(cut_field, '')}{TRUNCATION_MARKER}".strip()
    unit["partial"] = True
    return unit


def _top_level_title(prefix: str) -> str | None:
    value, _ = _string_field(prefix, "title")
    return value


def recover_truncated(
    text: str,
    content_type: ContentType = ContentType.notes,
    trace: ParseTrace | None = None,
    fallback_text: str | None = None,
) -> dict:
    """Rebuild a record from a cut-off response. Always returns at least one unit."""
    trace = trace if trace is not None else ParseTrace()
    trace.truncated = True
    trace.path = RecoveryPath.truncation
    max_depth = get_settings().max_nesting_depth
    unit_key = UNIT_KEYS[content_type][0]

    start = text.find("{")
    body = text[start:] if start != -1 else text
    starts = object_starts(body)

    units: list[dict] = []
    first_unit_at = None
    last_end = 0
    for pos in starts:
        if pos < last_end:
            continue
        end = find_object_end(body, pos, max_depth)
        if end == -1:
            continue
        try:
            obj = json.loads(body[pos:end])
        except json.JSONDecodeError:
            continue
        if not _is_unit(obj, content_type):
            continue
        units.append(obj)
        last_end = end
        if first_unit_at is None:
            first_unit_at = pos

    partial = None
    partial_at = None
    for pos in reversed([p for p in starts if p >= last_end]):
        if find_object_end(body, pos, max_depth) != -1:
            continue
        partial = salvage_partial_unit(body[pos:], content_type)
        if partial is not None:
            partial_at = pos
            break

    record: dict = {"partial": True}
    if partial is not None and partial_at == 0 and not units:
        # the record itself was the only object and never closed
        title = partial.get("title")
    else:
        boundary = min(p for p in (first_unit_at, partial_at, len(body)) if p is not None)
        title = _top_level_title(body[:boundary])
    if title:
        record["title"] = title.replace(TRUNCATION_MARKER, "").strip()

    if partial is not None:
        units.append(partial)
        trace.note(f"truncation: kept {len(units) - 1} complete unit(s) and 1 partial unit")
    else:
        trace.note(f"truncation: kept {len(units)} complete unit(s)")

    if not units:
        trace.path = RecoveryPath.markdown
        trace.note("truncation: no unit objects found, segmenting as markdown")
        source = strip_code_fences(fallback_text if fallback_text is not None else text)
        units = sections_to_units(split_markdown_sections(source), content_type)

    logger.saveToLog(
        f"[recover_truncated] Recovered {len(units)} {content_type.value} unit(s) from cut-off response",
        "WARNING",
    )
    record[unit_key] = units
    return record
