"""App factory: wires settings, local cache, remote adapter and orchestrator."""

from __future__ import annotations

from typing import Callable
from zoneinfo import ZoneInfo

from src.adapters.sheets_proxy import SheetsProxyAdapter
from src.config import settings
from src.core.sync_orchestrator import SyncOrchestrator
from src.data.db import CacheDB


def create_orchestrator(on_reset: Callable[[], None] | None = None) -> SyncOrchestrator:
    """Return a SyncOrchestrator configured from settings.

    Args:
        on_reset: Called after disconnect to hard-reload the UI.
    """
    tz = ZoneInfo(settings.TIMEZONE) if settings.TIMEZONE else None
    return SyncOrchestrator(
        remote=SheetsProxyAdapter(
            proxy_url=settings.SHEETS_PROXY_URL,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        ),
        storage=CacheDB(db_path=settings.CACHE_DB_PATH),
        debounce_seconds=settings.SYNC_DEBOUNCE_SECONDS,
        status_reset_seconds=settings.SYNC_STATUS_RESET_SECONDS,
        default_member_names=settings.DEFAULT_MEMBERS,
        tz=tz,
        on_reset=on_reset,
    )
