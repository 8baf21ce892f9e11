"""Songs a DJ has permanently disallowed."""
from dataclasses import replace
from typing import Dict, List, Optional

from barjukebox.core.errors import StoreCorrupt
from barjukebox.core.identity import resolve
from barjukebox.core.store import BLACKLIST_KEY, decode_items, encode_items
from barjukebox.models.song import BlacklistedSong


class BlacklistLedger:
    key = BLACKLIST_KEY

    def __init__(self) -> None:
        self._records: Dict[str, BlacklistedSong] = {}

    def __len__(self) -> int:
        return len(self._records)

    def contains(self, song_id: str) -> bool:
        return song_id in self._records

    def add(self, title: str, artist: str) -> BlacklistedSong:
        """Blacklist (title, artist). Adding a song twice keeps the first entry."""
        song_id = resolve(title, artist)
        record = self._records.get(song_id)
        if record is None:
            record = BlacklistedSong(song_id=song_id, title=title, artist=artist)
            self._records[song_id] = record
        return replace(record)

    def remove(self, song_id: str) -> Optional[BlacklistedSong]:
        return self._records.pop(song_id, None)

    def list_sorted(self) -> List[BlacklistedSong]:
        """Ascending by title, plain case-sensitive string order ("Zebra" < "apple")."""
        return sorted((replace(r) for r in self._records.values()), key=lambda r: r.title)

    def to_json(self) -> str:
        return encode_items(
            [
                {"id": r.song_id, "title": r.title, "artist": r.artist}
                for r in self._records.values()
            ]
        )

    def replace_from_json(self, text: str) -> None:
        """Replace every record with the snapshot's; raises StoreCorrupt and keeps nothing on bad data."""
        records: Dict[str, BlacklistedSong] = {}
        try:
            for item in decode_items(self.key, text):
                records[str(item["id"])] = BlacklistedSong(
                    song_id=str(item["id"]),
                    title=str(item["title"]),
                    artist=str(item["artist"]),
                )
        except StoreCorrupt:
            self._records = {}
            raise
        except (KeyError, TypeError) as e:
            self._records = {}
            raise StoreCorrupt(self.key, str(e)) from e
        self._records = records
