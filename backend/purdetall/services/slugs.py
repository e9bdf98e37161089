import re
import unicodedata

_DISALLOWED = re.compile(r"[^a-z0-9 -]")
_WHITESPACE = re.compile(r"\s+")
_REPEATED_HYPHENS = re.compile(r"-+")


def generate_slug(title: str) -> str:
    """Lowercase, strip accents and punctuation, hyphenate whitespace.

    >>> generate_slug("Protección  Cerámica: ¡Guía!")
    'proteccion-ceramica-guia'
    """
    normalized = unicodedata.normalize("NFD", title.lower())
    without_accents = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    cleaned = _DISALLOWED.sub("", without_accents)
    hyphenated = _WHITESPACE.sub("-", cleaned)
    return _REPEATED_HYPHENS.sub("-", hyphenated).strip("-")
