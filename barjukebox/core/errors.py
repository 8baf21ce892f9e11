"""Errors raised by the request lifecycle."""

BLACKLISTED = "blacklisted"
COOLDOWN = "cooldown"


class JukeboxError(Exception):
    """Base class for lifecycle errors."""


class InvalidSong(JukeboxError):
    """Title or artist is empty."""


class SongRejected(JukeboxError):
    """Request refused because the song is blacklisted or on cooldown."""

    def __init__(self, reason: str, title: str) -> None:
        self.reason = reason
        self.title = title
        if reason == COOLDOWN:
            message = f'"{title}" was played recently. Please wait a bit before requesting it again.'
        else:
            message = f'"{title}" is not available for requests.'
        super().__init__(message)


class SongNotFound(JukeboxError):
    """No active request for the song (usually a stale DJ view)."""

    def __init__(self, song_id: str) -> None:
        self.song_id = song_id
        super().__init__(f"No active request for {song_id}")


class EnrichmentUnavailable(JukeboxError):
    """Fun fact provider had nothing to say."""


class StoreCorrupt(JukeboxError):
    """Persisted or replayed ledger snapshot could not be decoded."""

    def __init__(self, key: str, detail: str) -> None:
        self.key = key
        super().__init__(f"Corrupt snapshot for {key}: {detail}")
