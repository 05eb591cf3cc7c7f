import re

from .scanner import iter_segments, map_outside_strings

_FENCE_BLOCK = re.compile(r"```[ \t]*[A-Za-z0-9_+-]*[ \t]*\r?\n?(.*?)```", re.DOTALL)
_OPEN_FENCE = re.compile(r"```[ \t]*[A-Za-z0-9_+-]*[ \t]*\r?\n?")
_JSON_LABEL = re.compile(r"^(?:\s*json\s*\n)+", re.IGNORECASE)
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_STRING_WHITESPACE = re.compile(r"[\n\r\t]")
_STRING_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][\w$-]*)(\s*:)")
_TRAILING_COMMA = re.compile(r"(?:,\s*)+([}\]])")
_LINE_COMMENT = re.compile(r"^\s*//.*?$", re.MULTILINE)


def _strip_common_artifacts(text: str) -> str:
    cleaned = text.lstrip("\ufeff").strip()
    cleaned = cleaned.replace("\u200b", "").replace("\u200c", "").replace("\u200d", "")
    cleaned = cleaned.replace("\ufeff", "")
    cleaned = _JSON_LABEL.sub("", cleaned)
    return cleaned.strip()


def iter_fenced_blocks(text: str) -> list[str]:
    return [m.group(1).strip() for m in _FENCE_BLOCK.finditer(text)]


def strip_code_fences(text: str) -> str:
    """Return the JSON payload of a fenced response, or the text unchanged.

    Several fenced blocks: the longest JSON-looking one wins. A fence that was
    opened but never closed (cut-off response) is dropped along with its
    language tag.
    """
    content = text.strip()
    if content[:1] in ("{", "["):
        return content
    blocks = iter_fenced_blocks(content)
    json_blocks = [b for b in blocks if b[:1] in ("{", "[")]
    if json_blocks:
        return max(json_blocks, key=len)
    if content.startswith("```"):
        body = _OPEN_FENCE.sub("", content, count=1)
        body = re.sub(r"\s*```\s*$", "", body)
        return body.strip()
    if not blocks:
        opening = _OPEN_FENCE.search(content)
        if opening:
            body = content[opening.end():].strip()
            if body[:1] in ("{", "["):
                return body
    return content


def _replace_curly_quotes(chunk: str) -> str:
    return (
        chunk.replace("\u201c", '"')
        .replace("\u201d", '"')
        .replace("\u2018", "'")
        .replace("\u2019", "'")
    )


def remove_control_characters(text: str) -> str:
    """Drop control characters, escaping raw line breaks and tabs inside strings."""
    out: list[str] = []
    for is_string, chunk in iter_segments(text):
        chunk = _CONTROL_CHARS.sub("", chunk)
        if is_string:
            chunk = _STRING_WHITESPACE.sub(lambda m: _STRING_ESCAPES[m.group(0)], chunk)
        out.append(chunk)
    return "".join(out)


def _find_single_quote_close(text: str, start: int) -> int:
    k = start
    while k < len(text):
        ch = text[k]
        if ch == "\\":
            k += 2
            continue
        if ch == "'":
            rest = text[k + 1:].lstrip()
            if not rest or rest[0] in ",:}]":
                return k
        k += 1
    return -1


def _requote(inner: str) -> str:
    buf: list[str] = []
    k = 0
    while k < len(inner):
        ch = inner[k]
        if ch == "\\" and k + 1 < len(inner):
            nxt = inner[k + 1]
            buf.append("'" if nxt == "'" else ch + nxt)
            k += 2
            continue
        buf.append('\\"' if ch == '"' else ch)
        k += 1
    return '"' + "".join(buf) + '"'


def normalize_single_quotes(text: str) -> str:
    """Rewrite single-quoted keys and values as double-quoted JSON strings.

    Only quotes in key or value position (after ``{ [ , :``) that are closed by
    a quote followed by ``, : } ]`` are rewritten; apostrophes inside
    double-quoted strings are never touched.
    """
    out: list[str] = []
    prev = ""
    in_string = False
    escaped = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
                prev = '"'
            i += 1
            continue
        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
            continue
        if ch == "'" and prev and prev in "{[,:":
            close = _find_single_quote_close(text, i + 1)
            if close != -1:
                out.append(_requote(text[i + 1:close]))
                prev = '"'
                i = close + 1
                continue
        out.append(ch)
        if not ch.isspace():
            prev = ch
        i += 1
    return "".join(out)


def _repair_structure(chunk: str) -> str:
    chunk = _LINE_COMMENT.sub("", chunk)
    chunk = _BARE_KEY.sub(r'\1"\2"\3', chunk)
    return _TRAILING_COMMA.sub(r"\1", chunk)


def normalize_json_text(text: str) -> str:
    """Make a model response more likely to parse as JSON.

    Pure and idempotent. Prose before the first ``{`` is kept as-is so quotes
    in a preamble cannot shift the string tracking of the payload.
    """
    cleaned = strip_code_fences(_strip_common_artifacts(text))
    start = 0 if cleaned.startswith("[") else cleaned.find("{")
    if start == -1:
        return cleaned
    head, body = cleaned[:start], cleaned[start:]
    body = map_outside_strings(body, _replace_curly_quotes)
    body = normalize_single_quotes(body)
    body = remove_control_characters(body)
    body = map_outside_strings(body, _repair_structure)
    return head + body
