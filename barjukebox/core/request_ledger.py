"""Active song requests keyed by identity, with increment-or-create semantics."""
from dataclasses import replace
from typing import Dict, List, Optional

from barjukebox.core.errors import StoreCorrupt
from barjukebox.core.identity import resolve
from barjukebox.core.store import REQUESTS_KEY, decode_items, encode_items
from barjukebox.models.song import SongRequest


class RequestLedger:
    """Insertion-ordered mapping of identity -> SongRequest."""

    key = REQUESTS_KEY

    def __init__(self) -> None:
        self._records: Dict[str, SongRequest] = {}

    def __contains__(self, song_id: str) -> bool:
        return song_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def get(self, song_id: str) -> Optional[SongRequest]:
        record = self._records.get(song_id)
        return replace(record) if record else None

    def submit(self, title: str, artist: str) -> str:
        """Add one request for (title, artist); returns its identity."""
        song_id = resolve(title, artist)
        existing = self._records.get(song_id)
        if existing is not None:
            existing.request_count += 1
        else:
            self._records[song_id] = SongRequest(song_id=song_id, title=title, artist=artist)
        return song_id

    def remove(self, song_id: str) -> Optional[SongRequest]:
        """Delete and return the request, or None if it was not there."""
        return self._records.pop(song_id, None)

    def list_by_count(self) -> List[SongRequest]:
        """Top requests: highest count first, ties in request order."""
        return sorted(
            (replace(r) for r in self._records.values()),
            key=lambda r: r.request_count,
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
                }
                for r in self._records.values()
            ]
        )

    def replace_from_json(self, text: str) -> None:
        """Replace every record with the snapshot's; raises StoreCorrupt and keeps nothing on bad data."""
        records: Dict[str, SongRequest] = {}
        try:
            for item in decode_items(self.key, text):
                count = int(item["requestCount"])
                if count < 1:
                    raise ValueError(f"requestCount {count} < 1")
                records[str(item["id"])] = SongRequest(
                    song_id=str(item["id"]),
                    title=str(item["title"]),
                    artist=str(item["artist"]),
                    request_count=count,
                )
        except StoreCorrupt:
            self._records = {}
            raise
        except (KeyError, TypeError, ValueError) as e:
            self._records = {}
            raise StoreCorrupt(self.key, str(e)) from e
        self._records = records
