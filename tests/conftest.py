"""Shared fixtures: controllable clock, in-memory bus, coordinator, API client."""
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient

from barjukebox.api.app import create_app
from barjukebox.api.state import AppState
from barjukebox.core.coordinator import LifecycleCoordinator
from barjukebox.core.dj_auth import DjGate
from barjukebox.core.enrichment import EnrichmentService, FactProvider
from barjukebox.core.sync_bridge import LocalBus

START_MS = 1_700_000_000_000
TWO_HOURS_MS = 2 * 60 * 60 * 1000


class FakeClock:
    """Epoch-ms clock that only moves when told to."""

    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def bus():
    return LocalBus()


@pytest.fixture
def fact_provider():
    provider = Mock(spec=FactProvider)
    provider.get_fact.return_value = "A fun fact."
    return provider


@pytest.fixture
def enrichment(fact_provider):
    service = EnrichmentService(fact_provider, max_workers=1)
    yield service
    service.shutdown()


@pytest.fixture
def coordinator(bus, clock, enrichment):
    return LifecycleCoordinator(bus.connect(), enrichment=enrichment, clock=clock)


@pytest.fixture
def app_state(bus, clock, enrichment):
    return AppState(
        bridge=bus.connect(),
        enrichment=enrichment,
        gate=DjGate("dj", "secret"),
        clock=clock,
    )


@pytest.fixture
def client(app_state):
    """TestClient without lifespan, so no background threads run."""
    return TestClient(create_app(app_state))


@pytest.fixture
def dj_headers(client):
    response = client.post("/api/dj/login", json={"username": "dj", "password": "secret"})
    assert response.status_code == 200
    return {"X-DJ-Token": response.json()["token"]}
