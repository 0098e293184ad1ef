"""Name normalization for fuzzy comparison of free-text person names."""

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")


def normalize_name(raw) -> str:
    """Canonicalize a person name for comparison.

    Trims, lowercases, strips diacritics (NFD decomposition, combining marks
    removed) and collapses whitespace runs to a single space. Anything that is
    not a string normalizes to the empty string.

    Examples:
        "  José   PÉREZ " -> "jose perez"
    """
    if not isinstance(raw, str):
        return ""
    decomposed = unicodedata.normalize("NFD", raw.strip().lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _WHITESPACE.sub(" ", stripped).strip()
