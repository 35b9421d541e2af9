"""Shared test fixtures."""

from __future__ import annotations

import itertools
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from studio_cli.config.manager import ConfigManager
from studio_cli.config.models import BackendProfile
from studio_cli.designer.registry import ComponentRegistry, default_registry
from studio_cli.designer.tree import DesignTree
from studio_cli.locking.manager import LockManager
from studio_cli.locking.store import MemoryLockStore
from studio_cli.logging_config import configure_logging


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def sequential_ids() -> Callable[[str], str]:
    counter = itertools.count(1)
    return lambda type_name: f"{type_name}-{next(counter)}"


@pytest.fixture(autouse=True)
def _isolate(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep tests away from the real config file and STUDIO_* env vars."""
    monkeypatch.setattr("studio_cli.config.manager.CONFIG_FILE", tmp_path / "default-config.toml")
    for var in (
        "STUDIO_BACKEND_URL",
        "STUDIO_API_TOKEN",
        "STUDIO_PROFILE",
        "STUDIO_HOLDER_ID",
        "STUDIO_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    configure_logging("WARNING")


@pytest.fixture
def tmp_config(tmp_path: Path) -> Path:
    """Return a temporary config file path."""
    return tmp_path / "config.toml"


@pytest.fixture
def config_manager(tmp_config: Path) -> ConfigManager:
    """Return a ConfigManager pointed at a temp config file."""
    return ConfigManager(config_path=tmp_config)


@pytest.fixture
def sample_profile() -> BackendProfile:
    """Return a sample backend profile for testing."""
    return BackendProfile(
        name="test-be",
        url="https://studio.local",
        token="test-token-123",
        user="alice",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def registry() -> ComponentRegistry:
    return default_registry()


@pytest.fixture
def tree(registry: ComponentRegistry) -> DesignTree:
    """An empty design with root id ``container-1``."""
    return DesignTree.new(registry, name="test", id_factory=sequential_ids())


@pytest.fixture
def lock_store() -> MemoryLockStore:
    return MemoryLockStore()


@pytest.fixture
def lock_manager(lock_store: MemoryLockStore, clock: FakeClock) -> LockManager:
    tokens = itertools.count(1)
    return LockManager(lock_store, clock=clock, token_factory=lambda: f"tok-{next(tokens)}")


@pytest.fixture
def lock_json() -> dict:
    """Sample lock row as served by the backend."""
    return {
        "resource_id": "customers",
        "holder_id": "bob",
        "token": "srv-token",
        "lock_type": "schema_edit",
        "acquired_at": "2026-03-02T09:00:00Z",
        "expires_at": "2026-03-02T11:00:00Z",
        "reason": "adding columns",
    }
