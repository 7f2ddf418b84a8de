"""Small helpers for names and identifiers."""

from typing import Optional

KINGDOM_SYNONYMS = {
    'Metazoa': 'Animalia',
    'Animalia': 'Animalia',
    'Archaeplastida': 'Plantae',
    'Viridiplantae': 'Plantae',
    'Plantae': 'Plantae',
}

_QUOTES_AND_BACKSLASHES = str.maketrans("", "", "\"\\")


def normalize(name: Optional[str]) -> str:
    """Turn a raw name into a lookup key.

    Lower-cases the name and removes quote characters and backslashes.
    Whitespace is left alone.
    """
    if name is None:
        return ""
    return name.lower().translate(_QUOTES_AND_BACKSLASHES)


def normalize_kingdom(name: Optional[str]) -> Optional[str]:
    """Map kingdom synonyms such as Metazoa onto a single spelling."""
    if name is None:
        return None
    return KINGDOM_SYNONYMS.get(name, name)


def strip_prefix(prefix: str, value: Optional[str]) -> Optional[str]:
    """Remove a leading prefix from value, if present."""
    if value is None:
        return None
    return value[len(prefix):] if value.startswith(prefix) else value
