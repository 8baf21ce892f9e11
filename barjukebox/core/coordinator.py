"""Request lifecycle: the only place the request, cooldown and blacklist ledgers change.

Per song identity:

    (none) --request--> Requested --play--> Cooldown --sweep--> (none)
    Requested --blacklist--> (none) + Blacklisted

Blacklisting is a flag over every state; it blocks new requests but leaves an
existing cooldown running. Every mutation is published through the SyncBridge
while the coordinator lock is held, and snapshots written by other instances
replace the matching ledger wholesale.
"""
import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from barjukebox.core.blacklist_ledger import BlacklistLedger
from barjukebox.core.cooldown_ledger import CooldownLedger
from barjukebox.core.enrichment import EnrichmentService
from barjukebox.core.errors import (
    BLACKLISTED,
    COOLDOWN,
    InvalidSong,
    SongNotFound,
    SongRejected,
    StoreCorrupt,
)
from barjukebox.core.identity import resolve
from barjukebox.core.request_ledger import RequestLedger
from barjukebox.core.sync_bridge import SyncBridge
from barjukebox.models.song import BlacklistedSong, CooldownSong, SongRequest

logger = logging.getLogger(__name__)

COOLDOWN_DURATION_MS = 2 * 60 * 60 * 1000


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RequestReceipt:
    """Committed request plus the pending fun fact (resolves to str or None)."""
    request: SongRequest
    fact: Future


@dataclass
class LedgerSnapshot:
    requests: List[SongRequest]
    cooldowns: List[CooldownSong]
    blacklist: List[BlacklistedSong]


class LifecycleCoordinator:
    def __init__(
        self,
        bridge: SyncBridge,
        enrichment: Optional[EnrichmentService] = None,
        clock: Callable[[], int] = now_ms,
        cooldown_duration_ms: int = COOLDOWN_DURATION_MS,
    ) -> None:
        self._bridge = bridge
        self._enrichment = enrichment
        self._clock = clock
        self._cooldown_duration_ms = cooldown_duration_ms
        self._lock = threading.RLock()
        self.requests = RequestLedger()
        self.cooldowns = CooldownLedger()
        self.blacklist = BlacklistLedger()
        self._ledgers: Dict[str, object] = {
            self.requests.key: self.requests,
            self.cooldowns.key: self.cooldowns,
            self.blacklist.key: self.blacklist,
        }
        for key, ledger in self._ledgers.items():
            self._replace_ledger(key, ledger, bridge.load(key))
        bridge.on_external_change(self.apply_external_change)

    def _replace_ledger(self, key: str, ledger, value: Optional[str]) -> None:
        if value is None:
            return
        try:
            ledger.replace_from_json(value)
        except StoreCorrupt as e:
            logger.warning("%s; starting %s empty", e, key)

    def _publish(self, *ledgers) -> None:
        for ledger in ledgers:
            self._bridge.publish(ledger.key, ledger.to_json())

    def request_song(self, title: str, artist: str) -> RequestReceipt:
        """Add a customer request. Raises SongRejected if blacklisted or on cooldown."""
        title, artist = title.strip(), artist.strip()
        if not title or not artist:
            raise InvalidSong("Both title and artist are required")
        with self._lock:
            song_id = resolve(title, artist)
            if self.blacklist.contains(song_id):
                logger.info("Request rejected (blacklisted): %s", song_id)
                raise SongRejected(BLACKLISTED, title)
            if self.cooldowns.is_active(song_id, self._clock()):
                logger.info("Request rejected (cooldown): %s", song_id)
                raise SongRejected(COOLDOWN, title)
            self.requests.submit(title, artist)
            self._publish(self.requests)
            request = self.requests.get(song_id)
        logger.info("Requested %s (count %d)", song_id, request.request_count)
        if self._enrichment is not None:
            fact = self._enrichment.lookup(song_id, title, artist)
        else:
            fact = Future()
            fact.set_result(None)
        return RequestReceipt(request=request, fact=fact)

    def play_song(self, song_id: str) -> CooldownSong:
        """Move a request onto cooldown. Raises SongNotFound if it is no longer requested."""
        with self._lock:
            record = self.requests.remove(song_id)
            if record is None:
                logger.debug("Play ignored, no active request: %s", song_id)
                raise SongNotFound(song_id)
            cooldown = self.cooldowns.start(record, self._clock(), self._cooldown_duration_ms)
            self._publish(self.requests, self.cooldowns)
        logger.info("Played %s, cooldown until %d", song_id, cooldown.cooldown_until)
        return cooldown

    def blacklist_song(self, title: str, artist: str) -> BlacklistedSong:
        """Blacklist a song and drop its pending request. An existing cooldown is kept."""
        title, artist = title.strip(), artist.strip()
        if not title or not artist:
            raise InvalidSong("Both title and artist are required")
        with self._lock:
            record = self.blacklist.add(title, artist)
            removed = self.requests.remove(record.song_id)
            if removed is not None:
                self._publish(self.blacklist, self.requests)
            else:
                self._publish(self.blacklist)
        logger.info("Blacklisted %s%s", record.song_id, " (request removed)" if removed else "")
        return record

    def unblacklist_song(self, song_id: str) -> bool:
        """Lift a blacklist entry; returns False if the song was not blacklisted."""
        with self._lock:
            removed = self.blacklist.remove(song_id)
            if removed is None:
                return False
            self._publish(self.blacklist)
        logger.info("Unblacklisted %s", song_id)
        return True

    def sweep_cooldowns(self) -> List[CooldownSong]:
        """Release songs whose cooldown has expired."""
        with self._lock:
            expired = self.cooldowns.sweep(self._clock())
            if expired:
                self._publish(self.cooldowns)
        for record in expired:
            logger.info("Cooldown over: %s", record.song_id)
        return expired

    def apply_external_change(self, key: str, value: Optional[str]) -> None:
        """Replace a ledger with a snapshot written by another instance."""
        ledger = self._ledgers.get(key)
        if ledger is None or value is None:
            return
        with self._lock:
            # Publishes also run under this lock, so a later local write is already in the store
            if not self._bridge.is_current(key, value):
                logger.debug("Skipped stale external change to %s", key)
                return
            self._replace_ledger(key, ledger, value)
        logger.info("Replaced %s from external change (%d records)", key, len(ledger))

    def now(self) -> int:
        return self._clock()

    def list_requests(self) -> List[SongRequest]:
        with self._lock:
            return self.requests.list_by_count()

    def list_cooldowns(self) -> List[CooldownSong]:
        with self._lock:
            return self.cooldowns.list_by_expiry()

    def list_blacklist(self) -> List[BlacklistedSong]:
        with self._lock:
            return self.blacklist.list_sorted()

    def snapshot(self) -> LedgerSnapshot:
        """All three ledgers read under one lock, so no half-applied play is visible."""
        with self._lock:
            return LedgerSnapshot(
                requests=self.requests.list_by_count(),
                cooldowns=self.cooldowns.list_by_expiry(),
                blacklist=self.blacklist.list_sorted(),
            )


class CooldownSweeper:
    """Background thread calling coordinator.sweep_cooldowns() every interval."""

    def __init__(self, coordinator: LifecycleCoordinator, interval_sec: float = 5.0) -> None:
        self._coordinator = coordinator
        self._interval_sec = interval_sec
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._stop.clear()

        def _sweep_loop() -> None:
            while not self._stop.wait(timeout=self._interval_sec):
                try:
                    self._coordinator.sweep_cooldowns()
                except Exception as e:
                    logger.warning("Cooldown sweep: %s", e)

        self._thread = threading.Thread(target=_sweep_loop, daemon=True)
        self._thread.start()
        logger.info("Cooldown sweep thread started (interval %.1fs)", self._interval_sec)

    def stop(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=5.0)
            self._thread = None
