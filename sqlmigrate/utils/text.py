"""Text helpers used when naming migration files."""

import re
import unicodedata
from typing import Optional

__all__ = ("slugify",)

_WORD_RE = re.compile(r"\w+")


def slugify(value: str, allow_unicode: bool = False, separator: Optional[str] = None) -> str:
    """Reduce ``value`` to lowercase word characters joined by ``separator``.

    Non-ASCII characters are transliterated or dropped unless
    ``allow_unicode`` is set. Punctuation and whitespace runs collapse into a
    single separator, and none is left at either end.

    Args:
        value: Text to convert, usually a migration name typed by a user.
        allow_unicode: Keep non-ASCII letters (NFKC normalized).
        separator: Joiner between words. Defaults to ``"-"``.

    Returns:
        The slug, or an empty string when ``value`` has no word characters.
    """
    if allow_unicode:
        normalized = unicodedata.normalize("NFKC", value)
    else:
        normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    words = _WORD_RE.findall(normalized.lower())
    return ("-" if separator is None else separator).join(words)
