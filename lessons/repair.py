import json

JSON_ESCAPE_CHARS = frozenset('"\\/bfnrtu')

_MISSING_COMMA = "Expecting ',' delimiter"


def repair_at_position(content: str, position: int) -> str:
    """Apply one targeted fix at the offset a JSON parser choked on.

    Quotes get escaped, markdown emphasis markers become spaces, stray
    backslashes are doubled, and anything else is deleted. Offsets outside
    the text leave it unchanged.
    """
    if position < 0 or position >= len(content):
        return content
    ch = content[position]
    if ch in ('"', "'"):
        return content[:position] + "\\" + content[position:]
    if ch in ("*", "_"):
        return content[:position] + " " + content[position + 1:]
    if ch == "\\":
        nxt = content[position + 1] if position + 1 < len(content) else ""
        if nxt not in JSON_ESCAPE_CHARS:
            return content[:position] + "\\\\" + content[position + 1:]
        return content[:position] + content[position + 1:]
    return content[:position] + content[position + 1:]


def locate_error_position(content: str, error: json.JSONDecodeError) -> int:
    """Map a decode error to the character that most likely caused it.

    When the parser wanted a comma right after a string closed, the
    closing quote was really an unescaped quote inside the value.
    """
    pos = error.pos
    if error.msg.startswith(_MISSING_COMMA):
        back = pos - 1
        while back >= 0 and content[back].isspace():
            back -= 1
        if back >= 0 and content[back] == '"' and pos < len(content) and content[pos] not in ",}]:":
            return back
    return pos


def is_truncation_error(content: str, error: json.JSONDecodeError) -> bool:
    if error.msg.startswith("Unterminated string"):
        return True
    return error.pos >= len(content.rstrip())
