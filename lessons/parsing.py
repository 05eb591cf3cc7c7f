import logger
from config import get_settings

from .completion import complete_record
from .extract import extract_json
from .markdown import sections_to_units, split_markdown_sections
from .models import GenerationRequest, ParseTrace
from .normalize import normalize_json_text, strip_code_fences
from .repair import repair_at_position
from .truncation import looks_truncated, recover_truncated
from .types import UNIT_KEYS, ContentType, RecoveryPath

__all__ = [
    "normalize_json_text",
    "parse_domain_response",
    "parse_json_response",
    "repair_at_position",
]


def parse_json_response(
    content: str,
    content_type: ContentType = ContentType.notes,
    trace: ParseTrace | None = None,
) -> dict | None:
    """Best-effort structured object from raw model output.

    Returns None only for empty input. Anything else resolves to a dict,
    possibly marked ``partial`` when it came from truncation recovery or the
    markdown fallback. ``trace`` records which path produced it.
    """
    trace = trace if trace is not None else ParseTrace()
    if not content or not content.strip():
        trace.path = RecoveryPath.empty
        trace.note("empty response")
        logger.saveToLog("[parse_json_response] Empty response, nothing to parse", "WARNING")
        return None

    normalized = normalize_json_text(content)
    record, ill_shaped = extract_json(normalized, content, content_type, trace)
    if record is not None:
        return record

    if trace.truncated or looks_truncated(normalized, get_settings().max_nesting_depth):
        return recover_truncated(normalized, content_type, trace, fallback_text=content)

    if ill_shaped is not None:
        trace.path = RecoveryPath.ill_shaped
        trace.note("ill-shaped: returning the first object that parsed")
        logger.saveToLog(
            f"[parse_json_response] No {content_type.value} object with title and units, "
            "using first parsed object",
            "DEBUG",
        )
        return ill_shaped

    trace.path = RecoveryPath.markdown
    trace.note("markdown: no JSON recovered, segmenting by headings")
    logger.saveToLog(
        f"[parse_json_response] Falling back to markdown sections for {content_type.value}",
        "WARNING",
    )
    sections = split_markdown_sections(strip_code_fences(content))
    return {
        UNIT_KEYS[content_type][0]: sections_to_units(sections, content_type),
        "partial": True,
    }


def parse_domain_response(content: str, request: GenerationRequest):
    """Raw model output to a complete DomainRecord. Never raises on bad input."""
    trace = ParseTrace()
    parsed = parse_json_response(content, request.content_type, trace)
    record = complete_record(parsed, request, trace)
    logger.saveToLog(
        f"[parse_domain_response] Built {request.content_type.value} record "
        f"'{record.title}' via {trace.path.value} "
        f"(units={len(record.units())}, repairs={trace.repair_attempts}, "
        f"defaulted={len(trace.defaulted_fields)}, partial={record.partial})",
        "INFO",
    )
    return record
