"""Durable snapshot store: one JSON blob per ledger key."""
import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from barjukebox.core.errors import StoreCorrupt

logger = logging.getLogger(__name__)

REQUESTS_KEY = "songRequests"
COOLDOWNS_KEY = "cooldownSongs"
BLACKLIST_KEY = "blacklist"
LEDGER_KEYS = (REQUESTS_KEY, COOLDOWNS_KEY, BLACKLIST_KEY)


def encode_items(items: List[Dict[str, Any]]) -> str:
    """Serialize a ledger snapshot (ordered list of records)."""
    return json.dumps(items)


def decode_items(key: str, text: str) -> List[Dict[str, Any]]:
    """Parse a ledger snapshot. Raises StoreCorrupt unless it is a JSON list of objects."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise StoreCorrupt(key, str(e)) from e
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise StoreCorrupt(key, "expected a list of objects")
    return data


class SnapshotStore(ABC):
    """Keyed text blobs read at startup and rewritten after every mutation."""

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """Stored text for key, or None if never written."""

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Replace the text stored under key."""


class MemoryStore(SnapshotStore):
    """Process-local store (tests, LocalBus)."""

    def __init__(self) -> None:
        self._blobs: Dict[str, str] = {}

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, value: str) -> None:
        self._blobs[key] = value


class FileStore(SnapshotStore):
    """One <key>.json file per ledger under a data directory."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = Path(data_dir)

    def path_for(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"

    def read(self, key: str) -> Optional[str]:
        """File text, or "" when the bytes are not UTF-8 (so snapshot decoding rejects it)."""
        p = self.path_for(key)
        if not p.exists():
            return None
        try:
            return p.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            logger.warning("Store: %s is not valid UTF-8: %s", p, e)
            return ""
        except OSError as e:
            logger.warning("Store: could not read %s: %s", p, e)
            return None

    def write(self, key: str, value: str) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        p = self.path_for(key)
        # Write then rename so a watcher never reads a half-written file
        tmp = p.with_suffix(".json.tmp")
        tmp.write_text(value, encoding="utf-8")
        os.replace(tmp, p)
