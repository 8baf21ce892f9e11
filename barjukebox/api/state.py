"""Shared application state (injected into routes)."""
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, Request

from barjukebox.config import (
    COOLDOWN_DURATION_MS,
    DATA_DIR,
    DJ_PASSWORD,
    DJ_USERNAME,
    ENRICHMENT_WORKERS,
    STORE_POLL_INTERVAL_SEC,
    SWEEP_INTERVAL_SEC,
)
from barjukebox.core.coordinator import CooldownSweeper, LifecycleCoordinator, now_ms
from barjukebox.core.dj_auth import DjGate
from barjukebox.core.enrichment import EnrichmentService, SpotifyFactProvider
from barjukebox.core.sync_bridge import FileBridge, SyncBridge


class AppState:
    def __init__(
        self,
        bridge: SyncBridge,
        enrichment: EnrichmentService,
        gate: DjGate,
        cooldown_duration_ms: int = COOLDOWN_DURATION_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.bridge = bridge
        self.enrichment = enrichment
        self.gate = gate
        self.coordinator = LifecycleCoordinator(
            bridge,
            enrichment=enrichment,
            clock=clock,
            cooldown_duration_ms=cooldown_duration_ms,
        )
        self.sweeper = CooldownSweeper(self.coordinator, interval_sec=SWEEP_INTERVAL_SEC)

    @classmethod
    def from_config(cls) -> "AppState":
        """Build state from env config: file-backed store, Spotify facts if credentials are set."""
        return cls(
            bridge=FileBridge(DATA_DIR),
            enrichment=EnrichmentService(SpotifyFactProvider.from_config(), max_workers=ENRICHMENT_WORKERS),
            gate=DjGate(DJ_USERNAME, DJ_PASSWORD),
        )

    def start(self) -> None:
        """Start background work: cooldown sweep and, for file stores, cross-process watching."""
        self.sweeper.start()
        if isinstance(self.bridge, FileBridge):
            self.bridge.start_watching(interval_sec=STORE_POLL_INTERVAL_SEC)

    def stop(self) -> None:
        if isinstance(self.bridge, FileBridge):
            self.bridge.stop_watching()
        self.sweeper.stop()
        self.enrichment.shutdown()


def get_state(request: Request) -> AppState:
    return request.app.state.jukebox


def require_dj(
    x_dj_token: Optional[str] = Header(None),
    state: AppState = Depends(get_state),
) -> str:
    """Dependency for DJ-only routes: X-DJ-Token must belong to a logged-in DJ."""
    if not state.gate.is_authenticated(x_dj_token):
        raise HTTPException(status_code=401, detail="DJ login required")
    return x_dj_token
