"""Recently played songs and the time (epoch ms) each may be requested again."""
from dataclasses import replace
from typing import Dict, List

from barjukebox.core.errors import StoreCorrupt
from barjukebox.core.store import COOLDOWNS_KEY, decode_items, encode_items
from barjukebox.models.song import CooldownSong, SongRequest


def remaining_ms(record: CooldownSong, now: int) -> int:
    """Milliseconds left on the cooldown, never negative."""
    return max(0, record.cooldown_until - now)


def format_remaining(ms: int) -> str:
    """HH:MM:SS countdown as shown on the DJ screen."""
    if ms <= 0:
        return "00:00:00"
    total_seconds = ms // 1000
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class CooldownLedger:
    """Insertion-ordered mapping of identity -> CooldownSong."""

    key = COOLDOWNS_KEY

    def __init__(self) -> None:
        self._records: Dict[str, CooldownSong] = {}

    def __contains__(self, song_id: str) -> bool:
        return song_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def start(self, record: SongRequest, now: int, duration: int) -> CooldownSong:
        """Put a just-played request on cooldown until now + duration."""
        cooldown = CooldownSong(
            song_id=record.song_id,
            title=record.title,
            artist=record.artist,
            request_count=record.request_count,
            cooldown_until=now + duration,
        )
        self._records[record.song_id] = cooldown
        return replace(cooldown)

    def sweep(self, now: int) -> List[CooldownSong]:
        """Drop every record whose cooldown_until <= now; returns the dropped records."""
        expired = [r for r in self._records.values() if r.cooldown_until <= now]
        for r in expired:
            del self._records[r.song_id]
        return expired

    def is_active(self, song_id: str, now: int) -> bool:
        """True while the song is held in the ledger.

        Expiry is applied by sweep(), so a record past its deadline keeps
        gating requests until the next sweep runs.
        """
        return song_id in self._records

    def list_by_expiry(self) -> List[CooldownSong]:
        """Latest deadline first, soonest to expire last."""
        return sorted(
            (replace(r) for r in self._records.values()),
            key=lambda r: r.cooldown_until,
            reverse=True,
        )

    def to_json(self) -> str:
        return encode_items(
            [
                {
                    "id": r.song_id,
                    "title": r.title,
                    "artist": r.artist,
                    "requestCount": r.request_count,
                    "cooldownUntil": r.cooldown_until,
                }
                for r in self._records.values()
            ]
        )

    def replace_from_json(self, text: str) -> None:
        """Replace every record with the snapshot's; raises StoreCorrupt and keeps nothing on bad data."""
        records: Dict[str, CooldownSong] = {}
        try:
            for item in decode_items(self.key, text):
                records[str(item["id"])] = CooldownSong(
                    song_id=str(item["id"]),
                    title=str(item["title"]),
                    artist=str(item["artist"]),
                    request_count=int(item.get("requestCount", 1)),
                    cooldown_until=int(item["cooldownUntil"]),
                )
        except StoreCorrupt:
            self._records = {}
            raise
        except (KeyError, TypeError, ValueError) as e:
            self._records = {}
            raise StoreCorrupt(self.key, str(e)) from e
        self._records = records
