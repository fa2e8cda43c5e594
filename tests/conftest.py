"""Shared test fixtures and configuration.

Sets up fake environment variables so src.config doesn't sys.exit(),
and provides common fixtures like a temp cache DB and a fake remote.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("SHEETS_PROXY_URL", "https://proxy.example.test/exec")
os.environ.setdefault("CACHE_DB_PATH", "data/test_cache.db")
os.environ.setdefault("TIMEZONE", "")

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from src.data.models import ConnectionResult, FamilyData

UTC = timezone.utc

# 2026-02-01 is a Sunday, so the week runs 1 Feb (Sun) .. 7 Feb (Sat).
SUNDAY = datetime(2026, 2, 1, 9, 0, tzinfo=UTC)
MONDAY = datetime(2026, 2, 2, 10, 0, tzinfo=UTC)
TUESDAY = datetime(2026, 2, 3, 10, 0, tzinfo=UTC)
WEDNESDAY = datetime(2026, 2, 4, 10, 0, tzinfo=UTC)


class FakeClock:
    """Settable clock for the orchestrator."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def tmp_cache_path(tmp_path):
    """Return a temporary SQLite cache path."""
    return str(tmp_path / "test_cache.db")


@pytest.fixture
def cache_db(tmp_cache_path):
    """Return a CacheDB instance backed by a temp file."""
    from src.data.db import CacheDB
    return CacheDB(db_path=tmp_cache_path)


@pytest.fixture
def clock():
    return FakeClock(MONDAY)


@pytest.fixture
def fake_remote():
    """A RemotePort stand-in: empty household, saves succeed."""
    remote = AsyncMock()
    remote.load_family_data = AsyncMock(return_value=FamilyData())
    remote.save_family_data = AsyncMock(return_value=True)
    remote.test_connection = AsyncMock(
        return_value=ConnectionResult(success=True, message="Connected to Sheet. Found 0 chores."),
    )
    return remote


@pytest.fixture
def orchestrator(fake_remote, cache_db, clock):
    """A SyncOrchestrator with short timers, a fake remote and a temp cache."""
    from src.core.sync_orchestrator import SyncOrchestrator
    return SyncOrchestrator(
        remote=fake_remote,
        storage=cache_db,
        debounce_seconds=0.05,
        status_reset_seconds=0.05,
        default_member_names=["Mom", "Dad"],
        tz=UTC,
        clock=clock,
    )
