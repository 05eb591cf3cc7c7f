import json

import logger
from config import get_settings

from .models import ParseTrace
from .normalize import iter_fenced_blocks, normalize_json_text
from .repair import is_truncation_error, locate_error_position, repair_at_position
from .scanner import find_top_level_objects
from .types import UNIT_KEYS, ContentType, RecoveryPath


def _lift(parsed, content_type: ContentType) -> dict | None:
    if isinstance(parsed, list):
        return {UNIT_KEYS[content_type][0]: parsed}
    if isinstance(parsed, dict):
        return parsed
    return None


def has_minimal_shape(parsed: dict, content_type: ContentType) -> bool:
    """A title plus the unit array of the content type, or a liftable ``content`` string."""
    title = parsed.get("title")
    if not isinstance(title, str) or not title.strip():
        return False
    if any(isinstance(parsed.get(key), list) for key in UNIT_KEYS[content_type]):
        return True
    content = parsed.get("content")
    return isinstance(content, str) and bool(content.strip())


def _repair_region(text: str) -> str:
    start = text.find("{")
    if start == -1:
        return ""
    end = text.rfind("}")
    return text[start:end + 1] if end > start else text[start:]


def extract_json(
    normalized: str,
    raw: str,
    content_type: ContentType = ContentType.notes,
    trace: ParseTrace | None = None,
) -> tuple[dict | None, dict | None]:
    """Run the parse strategies from strictest to most permissive.

    Returns ``(record, ill_shaped)``: the first object with the minimal shape,
    and the first object that parsed but lacked that shape. Either may be None.
    """
    trace = trace if trace is not None else ParseTrace()
    settings = get_settings()
    ill_shaped: dict | None = None

    def accept(candidate: dict | None, path: RecoveryPath) -> dict | None:
        nonlocal ill_shaped
        if candidate is None:
            return None
        if has_minimal_shape(candidate, content_type):
            trace.path = path
            trace.note(f"{path.value}: parsed")
            logger.saveToLog(f"[extract_json] Parsed {content_type.value} via {path.value}", "DEBUG")
            return candidate
        trace.note(f"{path.value}: parsed but missing title or units")
        if ill_shaped is None and candidate:
            ill_shaped = candidate
        return None

    def attempt(text: str, path: RecoveryPath) -> dict | None:
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            trace.note(f"{path.value}: {e.msg} at {e.pos}")
            return None
        except RecursionError:
            trace.note(f"{path.value}: nesting too deep")
            return None
        return accept(_lift(parsed, content_type), path)

    stripped = normalized.strip()

    if stripped[:1] + stripped[-1:] in ("{}", "[]"):
        found = attempt(stripped, RecoveryPath.direct)
        if found is not None:
            return found, None
        if stripped.startswith("[") and ill_shaped is not None:
            # a complete top-level array is the whole payload; its items are units, not records
            return None, ill_shaped

    for block in sorted(iter_fenced_blocks(raw), key=len, reverse=True):
        candidate = normalize_json_text(block)
        if candidate[:1] not in ("{", "["):
            continue
        found = attempt(candidate, RecoveryPath.fenced)
        if found is not None:
            return found, None

    substrings = find_top_level_objects(stripped, settings.max_nesting_depth)
    for candidate in sorted(substrings, key=len, reverse=True):
        if len(candidate) <= 2:
            continue
        found = attempt(candidate, RecoveryPath.substring)
        if found is not None:
            return found, None

    candidate = _repair_region(stripped)
    repairs = 0
    while candidate:
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as e:
            if is_truncation_error(candidate, e):
                trace.truncated = True
                trace.note(f"repair: input ends before the JSON closes ({e.msg})")
                break
            if repairs >= settings.max_repair_attempts:
                trace.note(f"repair: gave up after {repairs} attempts ({e.msg} at {e.pos})")
                break
            repaired = repair_at_position(candidate, locate_error_position(candidate, e))
            if repaired == candidate:
                break
            candidate = repaired
            repairs += 1
            trace.repair_attempts = repairs
            continue
        except RecursionError:
            trace.note("repair: nesting too deep")
            break
        found = accept(_lift(parsed, content_type), RecoveryPath.repair)
        if found is not None:
            return found, None
        break

    return None, ill_shaped
