"""Shared utilities used across the diagnostic engine."""

import math
import re
import unicodedata

_WORD_RE = re.compile(r"[\w-]+")

EARTH_RADIUS_KM = 6371.0


def normalize_text(value: str) -> str:
    """Lowercase and trim user text, collapsing inner whitespace.

    Decomposed accents (NFD, as some mobile keyboards send them) are
    composed first.

    Examples:
        >>> normalize_text("  Mon ÉCRAN   est cassé ")
        'mon écran est cassé'
    """
    return " ".join(unicodedata.normalize("NFC", value).lower().split())


def words_in(value: str) -> set[str]:
    """Return the set of word tokens in already-normalized text.

    Hyphenated words stay whole; apostrophes split elisions.

    Examples:
        >>> sorted(words_in("le haut-parleur ne s'allume pas"))
        ['allume', 'haut-parleur', 'le', 'ne', 'pas', 's']
    """
    return set(_WORD_RE.findall(value))


def clamp(value: float, low: float, high: float) -> float:
    """Clamp ``value`` into the closed interval [low, high]."""
    return max(low, min(high, value))


def haversine_km(a: tuple[float, float], b: tuple[float, float]) -> float:
    """Great-circle distance in kilometres between two (lat, lng) points."""
    lat1, lng1 = map(math.radians, a)
    lat2, lng2 = map(math.radians, b)
    dlat = lat2 - lat1
    dlng = lng2 - lng1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(min(1.0, h)))
