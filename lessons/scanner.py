"""String-aware scanning helpers shared by the normalizer, extractor and truncation recovery.

All helpers track JSON string regions (double quotes with backslash escapes) so
braces, commas or quotes that appear inside string values are never treated as
structure.
"""

from typing import Callable, Iterator


def iter_segments(text: str) -> Iterator[tuple[bool, str]]:
    """Yield ``(is_string, chunk)`` pairs covering ``text`` in order.

    String chunks include their surrounding quotes. An unterminated string at
    the end of the text is yielded as a string chunk without a closing quote.
    """
    buf: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            buf.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                yield True, "".join(buf)
                buf = []
                in_string = False
            continue
        if ch == '"':
            if buf:
                yield False, "".join(buf)
            buf = [ch]
            in_string = True
            continue
        buf.append(ch)
    if buf:
        yield in_string, "".join(buf)


def map_outside_strings(text: str, fn: Callable[[str], str]) -> str:
    return "".join(chunk if is_string else fn(chunk) for is_string, chunk in iter_segments(text))


def find_object_end(text: str, start: int, max_depth: int = 64) -> int:
    """Return the index just past the ``}`` closing the object opened at ``start``.

    Returns -1 when the object never closes, brackets are mismatched, or the
    nesting exceeds ``max_depth``.
    """
    stack: list[str] = []
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "[{":
            stack.append(ch)
            if len(stack) > max_depth:
                return -1
        elif ch in "]}":
            if not stack:
                return -1
            top = stack.pop()
            if (top == "{") != (ch == "}"):
                return -1
            if not stack:
                return i + 1
    return -1


def find_top_level_objects(text: str, max_depth: int = 64) -> list[str]:
    """Return all non-overlapping balanced ``{...}`` substrings at top level.

    Prose around the objects is not string-tracked, so stray quotes or
    apostrophes in a preamble cannot hide the payload.
    """
    objects: list[str] = []
    i = text.find("{")
    while i != -1:
        end = find_object_end(text, i, max_depth)
        if end == -1:
            # everything after an unclosed brace belongs to it
            break
        objects.append(text[i:end])
        i = text.find("{", end)
    return objects


def object_starts(text: str, offset: int = 0) -> list[int]:
    """Positions of every ``{`` outside string values, scanning from ``offset``."""
    starts: list[int] = []
    in_string = False
    escaped = False
    for i in range(offset, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            starts.append(i)
    return starts


def has_unbalanced_structure(text: str) -> bool:
    stack: list[str] = []
    in_string = False
    escaped = False
    for ch in text:
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
            continue
        if ch in "[{":
            stack.append(ch)
        elif ch in "]}":
            if not stack:
                return True
            top = stack.pop()
            if (top == "[" and ch != "]") or (top == "{" and ch != "}"):
                return True
    return in_string or bool(stack)
