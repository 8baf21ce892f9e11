"""Song records held by the request, cooldown and blacklist ledgers."""
from dataclasses import dataclass


@dataclass
class SongRequest:
    """Active request: one per song identity, count grows with repeat requests."""
    song_id: str
    title: str
    artist: str
    request_count: int = 1


@dataclass
class CooldownSong:
    """Played song that cannot be requested again until cooldown_until (epoch ms)."""
    song_id: str
    title: str
    artist: str
    request_count: int
    cooldown_until: int


@dataclass
class BlacklistedSong:
    """Song a DJ has disallowed from being requested."""
    song_id: str
    title: str
    artist: str
