"""Shared pytest fixtures for glfstat tests."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from glfstat.app import app
from glfstat.config import reset_settings_cache
from glfstat.rounds.service import RoundShotService, get_round_service
from glfstat.store.domain import DomainStore, get_domain_store
from glfstat.store.snapshot import MemorySnapshotStore
from glfstat.tracking.registry import get_measurement_registry


def _clear_caches() -> None:
    get_measurement_registry.cache_clear()
    get_round_service.cache_clear()
    get_domain_store.cache_clear()
    reset_settings_cache()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def snapshots() -> MemorySnapshotStore:
    return MemorySnapshotStore()


@pytest.fixture
def store(snapshots) -> DomainStore:
    domain = DomainStore(snapshots)
    domain.load()
    return domain


@pytest.fixture
def service(store) -> RoundShotService:
    return RoundShotService(store)


@pytest.fixture
def roster(store):
    """A championship round with two players, returned as (round, p1, p2)."""

    alice = store.create_player("Alice", "#ff0000")
    bob = store.create_player("Bob", "#0000ff")
    round_obj = store.create_round(
        "2024-05-01", "Pine Valley", "championship", [alice.id, bob.id]
    )
    return round_obj, alice, bob


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setenv("GLFSTAT_STORAGE", "file")
    monkeypatch.setenv("GLFSTAT_DATA_FILE", str(tmp_path / "glfstat.json"))
    monkeypatch.setenv("GLFSTAT_GPS_FIX_TIMEOUT_S", "0.5")
    monkeypatch.setenv("GLFSTAT_ALLOW_CLEAR", "true")
    _clear_caches()
    with TestClient(app) as test_client:
        yield test_client
    _clear_caches()
