"""Helpers shared by service-level queries."""

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def contains_pattern(term: str) -> str:
    """LIKE pattern matching ``term`` anywhere, to be used with ``escape=LIKE_ESCAPE``."""
    return f"%{escape_like(term)}%"
