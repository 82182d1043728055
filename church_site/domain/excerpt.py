import re

EXCERPT_MAX_LENGTH = 140
ELLIPSIS = "…"

_WHITESPACE = re.compile(r"\s+")


def make_excerpt(content: str, max_length: int = EXCERPT_MAX_LENGTH) -> str:
    """
    Derive the listing excerpt of a post body.

    Whitespace runs collapse to a single space; text longer than
    `max_length` is cut, the cut's trailing whitespace dropped and an
    ellipsis appended.
    """
    if not content:
        return ""
    clean = _WHITESPACE.sub(" ", content).strip()
    if len(clean) <= max_length:
        return clean
    return f"{clean[:max_length].rstrip()}{ELLIPSIS}"
