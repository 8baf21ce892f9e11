"""Data models for requested, cooling-down and blacklisted songs."""
from barjukebox.models.song import BlacklistedSong, CooldownSong, SongRequest

__all__ = [
    "SongRequest",
    "CooldownSong",
    "BlacklistedSong",
]
