"""Song identity: canonical key derived from title and artist."""
import re

_WHITESPACE = re.compile(r"\s+")


def _normalize(text: str) -> str:
    return _WHITESPACE.sub("-", text.strip().lower())


def resolve(title: str, artist: str) -> str:
    """Return the identity shared by every spelling of (title, artist).

    Each field is trimmed, lower-cased and has whitespace runs replaced by a
    single hyphen, then joined as "artist-title".
    """
    return f"{_normalize(artist)}-{_normalize(title)}"
