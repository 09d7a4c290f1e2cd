"""Recognition of game key formats and normalisation of game names."""

from __future__ import annotations

import re

# The character class deliberately admits a comma alongside letters and digits.
_CHUNK = "[a-zA-Z0-9,]"


def _pattern(*lengths: int) -> re.Pattern[str]:
    return re.compile("-".join(f"{_CHUNK}{{{n}}}" for n in lengths))


_GOG = _pattern(5, 5, 5, 5)
_STEAM = (_pattern(5, 5, 5), _pattern(5, 5, 5, 5, 5))
_PS3 = _pattern(4, 4, 4)
_UPLAY = (_pattern(4, 4, 4, 4), _pattern(3, 4, 4, 4, 4))
_ORIGIN = _pattern(4, 4, 4, 4, 4)


def is_gog(key: str) -> bool:
    """Return True if the key has the GOG layout."""
    return _GOG.fullmatch(key) is not None


def is_steam(key: str) -> bool:
    """Return True if the key has one of the Steam layouts."""
    return any(p.fullmatch(key) for p in _STEAM)


def is_ps3(key: str) -> bool:
    """Return True if the key has the PS3 layout."""
    return _PS3.fullmatch(key) is not None


def is_uplay(key: str) -> bool:
    """Return True if the key has one of the Uplay layouts."""
    return any(p.fullmatch(key) for p in _UPLAY)


def is_origin(key: str) -> bool:
    """Return True if the key has the Origin layout."""
    return _ORIGIN.fullmatch(key) is not None


def is_url(key: str) -> bool:
    """Return True if the key is a link."""
    return key.startswith("http")


_SERVICES = (
    (is_gog, "GOG"),
    (is_steam, "Steam"),
    (is_ps3, "PS3"),
    (is_uplay, "Uplay"),
    (is_origin, "Origin"),
    (is_url, "Gift Link"),
)


def service_type(key: str) -> str:
    """Name the service a key belongs to, or "Unknown"."""
    for matches, name in _SERVICES:
        if matches(key):
            return name
    return "Unknown"


def clean_key(name: str, key: str) -> str:
    """Strip a trailing key from a name and trim surrounding whitespace."""
    return name.removesuffix(key).strip()


def normalize_game(name: str) -> str:
    """Lower-case a game name and remove its spaces."""
    return name.lower().replace(" ", "")