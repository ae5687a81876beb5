"""Shell escaping helpers for values embedded in the launcher script.

One function per quoting context. None of them adds or strips enclosing
quotes; the template decides the context of every slot.
"""

from __future__ import annotations

from typing import Optional


def escape_bare(value: Optional[str]) -> str:
    """Escape backslashes, single quotes and double quotes.

    Shell expansion characters (``$``, backticks, ``;``, ``|``, ``&``) are
    left alone; the caller owns the quoting context.

    Example: escape_bare("it's") -> "it\\'s"
    """
    if not value:
        return ""
    # Backslashes first so the quote escapes are not doubled again.
    return value.replace("\\", "\\\\").replace("'", "\\'").replace('"', '\\"')


def escape_for_double_quotes(value: Optional[str]) -> str:
    """Escape a value that is interpolated inside ``"..."``.

    Single quotes are literal inside double quotes and pass through.
    """
    if not value:
        return ""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def escape_for_single_quotes(value: Optional[str]) -> str:
    """Escape a value that is interpolated inside ``'...'``.

    Nothing expands inside single quotes, so each ``'`` closes the string,
    adds an escaped quote and reopens it.

    Example: escape_for_single_quotes("it's") -> "it'\\''s"
    """
    if not value:
        return ""
    return value.replace("'", "'\\''")
