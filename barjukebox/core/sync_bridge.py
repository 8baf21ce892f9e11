"""Propagate ledger snapshots between instances and persist them.

Replication is last-writer-wins per whole ledger: publishing a snapshot
overwrites every other instance's copy of that ledger once they observe the
change. This is eventually consistent, not linearizable; two instances writing
the same ledger at nearly the same moment can lose one of the writes.
"""
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Dict, List, Optional

from barjukebox.core.store import LEDGER_KEYS, FileStore, MemoryStore, SnapshotStore

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[str, Optional[str]], None]


class SyncBridge(ABC):
    """Persistence plus change notification for the three ledger snapshots."""

    def __init__(self, store: SnapshotStore) -> None:
        self.store = store
        self._handlers: List[ChangeHandler] = []

    def load(self, key: str) -> Optional[str]:
        """Current persisted snapshot for key, or None if never written."""
        return self.store.read(key)

    @abstractmethod
    def publish(self, key: str, snapshot: str) -> None:
        """Persist snapshot under key and tell the other instances."""

    def is_current(self, key: str, value: Optional[str]) -> bool:
        """True if value is still what the store holds for key.

        A handler checks this before applying a change, so a snapshot that was
        overtaken by a later write (ours or another instance's) is skipped.
        """
        return self.store.read(key) == value

    def on_external_change(self, handler: ChangeHandler) -> None:
        """Register handler(key, new_value) for snapshots written by other instances."""
        self._handlers.append(handler)

    def _notify(self, key: str, value: Optional[str]) -> None:
        for handler in list(self._handlers):
            try:
                handler(key, value)
            except Exception:
                logger.exception("Sync: change handler failed for %s", key)


class LocalBus:
    """In-process hub: every connected bridge sees the others' publishes."""

    def __init__(self, store: Optional[SnapshotStore] = None) -> None:
        self.store = store if store is not None else MemoryStore()
        self._bridges: List["LocalBridge"] = []
        self._lock = threading.Lock()

    def connect(self) -> "LocalBridge":
        bridge = LocalBridge(self)
        with self._lock:
            self._bridges.append(bridge)
        return bridge

    def disconnect(self, bridge: "LocalBridge") -> None:
        with self._lock:
            if bridge in self._bridges:
                self._bridges.remove(bridge)

    def broadcast(self, sender: "LocalBridge", key: str, snapshot: str) -> None:
        with self._lock:
            targets = [b for b in self._bridges if b is not sender]
        for bridge in targets:
            bridge._notify(key, snapshot)


class LocalBridge(SyncBridge):
    def __init__(self, bus: LocalBus) -> None:
        super().__init__(bus.store)
        self._bus = bus

    def publish(self, key: str, snapshot: str) -> None:
        self.store.write(key, snapshot)
        self._bus.broadcast(self, key, snapshot)


class FileBridge(SyncBridge):
    """Bridge over a FileStore; polls the files to notice writes by other processes."""

    def __init__(self, data_dir: Path) -> None:
        super().__init__(FileStore(data_dir))
        # Last content seen or written per key, so our own writes are not reported back
        self._seen: Dict[str, Optional[str]] = {}
        self._seen_lock = threading.Lock()
        self._watch_thread: Optional[threading.Thread] = None
        self._stop_watch = threading.Event()

    def load(self, key: str) -> Optional[str]:
        value = self.store.read(key)
        with self._seen_lock:
            self._seen[key] = value
        return value

    def publish(self, key: str, snapshot: str) -> None:
        with self._seen_lock:
            self._seen[key] = snapshot
            self.store.write(key, snapshot)

    def poll(self) -> List[str]:
        """Report every key whose file content changed since last seen; returns those keys."""
        changed = []
        for key in LEDGER_KEYS:
            try:
                with self._seen_lock:
                    value = self.store.read(key)
                    if value is None or value == self._seen.get(key):
                        continue
                    self._seen[key] = value
            except Exception as e:
                logger.warning("Sync: could not check %s: %s", key, e)
                continue
            changed.append(key)
            logger.debug("Sync: external change to %s", key)
            self._notify(key, value)
        return changed

    def start_watching(self, interval_sec: float = 1.0) -> None:
        """Start background poll loop."""
        self._stop_watch.clear()

        def _watch_loop() -> None:
            while not self._stop_watch.wait(timeout=interval_sec):
                try:
                    self.poll()
                except Exception as e:
                    logger.warning("Sync: store poll failed: %s", e)

        self._watch_thread = threading.Thread(target=_watch_loop, daemon=True)
        self._watch_thread.start()

    def stop_watching(self) -> None:
        """Stop background poll loop."""
        self._stop_watch.set()
        if self._watch_thread:
            self._watch_thread.join(timeout=2.0)
            self._watch_thread = None
