"""Fun facts for requested songs, looked up in the background.

Lookups are advisory: they start after the request is committed, are keyed by
song identity so a newer lookup for the same song cancels the pending one, and
their results only ever reach the caller through the returned future. Any
failure or timeout becomes None.
"""
import logging
import threading
from abc import ABC, abstractmethod
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from typing import Dict, Optional

from barjukebox.core.errors import EnrichmentUnavailable
from barjukebox.core.spotify_client import get_spotify_client, search_track

logger = logging.getLogger(__name__)


class FactProvider(ABC):
    @abstractmethod
    def get_fact(self, title: str, artist: str) -> str:
        """Return one short fact about the song; raise EnrichmentUnavailable if there is none."""


class SpotifyFactProvider(FactProvider):
    """Phrase a fact from Spotify catalog data (album, release year, popularity).

    Stands in for a text-generation service: the fact is a fixed sentence
    template filled from catalog fields, not generated prose.
    """

    def __init__(self, sp) -> None:
        self._sp = sp

    @classmethod
    def from_config(cls) -> Optional["SpotifyFactProvider"]:
        sp = get_spotify_client()
        return cls(sp) if sp is not None else None

    def get_fact(self, title: str, artist: str) -> str:
        track = search_track(self._sp, title, artist)
        if track is None:
            raise EnrichmentUnavailable(f"No Spotify match for {title} / {artist}")
        fact = f'"{track["name"]}" by {track["artists"]}'
        if track["album"]:
            fact += f' appears on "{track["album"]}"'
        year = track["release_date"][:4]
        if year:
            fact += f", released in {year}"
        fact += "."
        if track["popularity"] >= 70:
            fact += " It is one of the most streamed tracks on Spotify right now."
        return fact


class EnrichmentService:
    """Runs FactProvider lookups on a small thread pool."""

    def __init__(self, provider: Optional[FactProvider], max_workers: int = 2) -> None:
        self._provider = provider
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="fun-fact")
        self._pending: Dict[str, Future] = {}
        self._lock = threading.Lock()

    def lookup(self, song_id: str, title: str, artist: str) -> Future:
        """Start a lookup; the future resolves to the fact or None. Supersedes any pending lookup for song_id."""
        with self._lock:
            previous = self._pending.get(song_id)
            if previous is not None and not previous.done():
                previous.cancel()
            if self._provider is None:
                future: Future = Future()
                future.set_result(None)
            else:
                future = self._executor.submit(self._fetch, title, artist)
            self._pending[song_id] = future
        future.add_done_callback(lambda f, key=song_id: self._forget(key, f))
        return future

    def _forget(self, song_id: str, future: Future) -> None:
        with self._lock:
            if self._pending.get(song_id) is future:
                del self._pending[song_id]

    def _fetch(self, title: str, artist: str) -> Optional[str]:
        try:
            return self._provider.get_fact(title, artist)
        except EnrichmentUnavailable as e:
            logger.info("Fun fact: %s", e)
        except Exception as e:
            logger.warning("Fun fact lookup failed for %s / %s: %s", title, artist, e)
        return None

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)


def wait_for_fact(future: Future, timeout: float) -> Optional[str]:
    """Block up to timeout seconds for a fact; None on timeout or cancellation."""
    try:
        return future.result(timeout=timeout)
    except (FutureTimeout, CancelledError):
        return None
