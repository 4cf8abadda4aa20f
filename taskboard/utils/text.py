import re

_WS_RE = re.compile(r"\s+")


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()


def cut(text: str, start: int, end: int) -> str:
    """Remove text[start:end]; the gap is left for collapse_whitespace."""
    return text[:start] + text[end:]


def contains_either_way(a: str, b: str) -> bool:
    a, b = a.lower(), b.lower()
    return a in b or b in a
