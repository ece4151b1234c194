"""File-type labels for file items, looked up through pygments lexers."""

from __future__ import annotations

from functools import lru_cache

from pygments.lexers import get_lexer_for_filename
from pygments.util import ClassNotFound


@lru_cache(maxsize=512)
def language_for(filename: str) -> str | None:
    """Return the pygments lexer name for ``filename`` or ``None`` when unknown."""
    if not filename:
        return None
    try:
        lexer = get_lexer_for_filename(filename)
    except ClassNotFound:
        return None
    return lexer.name
