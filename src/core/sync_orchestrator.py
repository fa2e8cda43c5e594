"""
Family Chores: Sync Orchestrator.

Owns the in-memory chore and member collections for a running app and keeps
the two mirrors up to date: the local cache is written on every change, the
remote store receives the full state after a quiet period (debounce).

Sync status moves idle → syncing → success | error → idle. The revert to
idle happens after a fixed delay, and only if no newer push has started.
Each push takes a sequence number; a response that belongs to an older push
never overwrites the status of a newer one.

All remote failures are absorbed here and turned into SyncStatus.ERROR plus
a readable last_error. Nothing in the sync path raises to the caller.

This module is provider-agnostic: it depends on the RemotePort and
StoragePort protocols, not on specific implementations.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING, Callable, Coroutine, Iterable

from src.core import chore_engine
from src.core.recurrence import filter_chores, is_completed
from src.core.sharing_code import generate_sharing_code, normalize_sharing_code
from src.data.local_cache import LocalCache
from src.data.models import (
    UNASSIGNED,
    Chore,
    ConnectionResult,
    FamilyData,
    FamilyMember,
    Frequency,
    SyncStatus,
)

if TYPE_CHECKING:
    from src.ports.remote_port import RemotePort
    from src.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Debounced write-through of family data to a remote store."""

    def __init__(
        self,
        remote: RemotePort,
        storage: StoragePort,
        debounce_seconds: float | None = None,
        status_reset_seconds: float | None = None,
        default_member_names: Iterable[str] | None = None,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] | None = None,
        on_reset: Callable[[], None] | None = None,
    ) -> None:
        if debounce_seconds is None or status_reset_seconds is None or default_member_names is None:
            from src.config import settings
            if debounce_seconds is None:
                debounce_seconds = settings.SYNC_DEBOUNCE_SECONDS
            if status_reset_seconds is None:
                status_reset_seconds = settings.SYNC_STATUS_RESET_SECONDS
            if default_member_names is None:
                default_member_names = settings.DEFAULT_MEMBERS

        self._remote = remote
        self._cache = LocalCache(storage)
        self._debounce = debounce_seconds
        self._status_reset = status_reset_seconds
        self._default_names = list(default_member_names)
        self._tz = tz
        self._clock = clock or (lambda: datetime.now(self._tz))
        self._on_reset = on_reset

        self.chores: list[Chore] = []
        self.members: list[FamilyMember] = chore_engine.default_members(self._default_names)
        self.sharing_code = ""
        self.loaded = False

        self.status = SyncStatus.IDLE
        self.last_sync: datetime | None = None
        self.last_error = ""
        self.connection_status = ""
        self.health_check: ConnectionResult | None = None

        self._dirty = False
        self._sync_seq = 0
        self._debounce_task: asyncio.Task | None = None
        self._reset_task: asyncio.Task | None = None
        self._background: set[asyncio.Task] = set()

    def now(self) -> datetime:
        return self._clock()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Initial load for the sharing code remembered on this device."""
        self.sharing_code = self._cache.get_sharing_code()
        if self.sharing_code:
            family = await self._load(self.sharing_code)
            self._adopt(family)
        self.loaded = True

    async def _load(self, sharing_code: str) -> FamilyData:
        """Remote first; if that fails, whatever the local cache holds."""
        try:
            return await self._remote.load_family_data(sharing_code)
        except Exception as exc:
            logger.warning("Remote load for %s failed, using local cache: %s", sharing_code, exc)
            self.last_error = str(exc) or exc.__class__.__name__
            return self._cache.load()

    def _adopt(self, family: FamilyData) -> None:
        """Replace in-memory state; an empty member list keeps the current members."""
        self.chores = list(family.chores)
        if family.members:
            self.members = list(family.members)
        if family.source == "remote":
            self.last_sync = self.now()
            self._cache.save(self.chores, self.members)

    # ------------------------------------------------------------------
    # Sharing code flows
    # ------------------------------------------------------------------

    async def join(self, raw_code: str) -> bool:
        """Connect to an existing household and adopt its data.

        Returns True when the data came from the remote store, False when
        the code was empty or only the local cache could be used.
        """
        code = normalize_sharing_code(raw_code)
        if not code:
            return False

        self.connection_status = "Connecting..."
        self._cache.set_sharing_code(code)
        self.sharing_code = code

        family = await self._load(code)
        self._adopt(family)
        self.loaded = True

        if family.source == "remote":
            self._mark_changed()
            self.connection_status = "Connected!"
            logger.info("Joined %s (%d chores)", code, len(self.chores))
            return True

        # Cached rows may belong to another household; never push them under this code.
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None
        self._dirty = False
        self.connection_status = "Could not reach the shared list, showing cached data."
        return False

    async def generate(self) -> str:
        """Start a new household seeded with the current in-memory state."""
        self.connection_status = "Generating..."
        code = generate_sharing_code()
        self._cache.set_sharing_code(code)
        self.sharing_code = code
        self.loaded = True

        await self.sync_now()
        self.connection_status = f"New code generated: {code}"
        logger.info("Generated sharing code %s", code)
        return code

    def disconnect(self) -> None:
        """Forget the household on this device and hard-reset the app.

        Remote data is left untouched. Pushes already in flight are not
        cancelled, but their results no longer affect the status.
        """
        self._cancel_timers()
        self._cache.clear()
        self._sync_seq += 1

        self.sharing_code = ""
        self.chores = []
        self.members = chore_engine.default_members(self._default_names)
        self.status = SyncStatus.IDLE
        self.last_sync = None
        self.last_error = ""
        self._dirty = False
        self.connection_status = "Disconnected."
        logger.info("Disconnected from shared list")

        if self._on_reset is not None:
            self._on_reset()

    async def test_connection(self) -> ConnectionResult:
        """Probe the remote store for the current sharing code."""
        if not self.sharing_code:
            result = ConnectionResult(success=False, message="No sharing code set")
        else:
            try:
                result = await self._remote.test_connection(self.sharing_code)
            except Exception as exc:
                logger.warning("Connection test failed: %s", exc)
                result = ConnectionResult(success=False, message=str(exc) or "Unknown network error")
        self.health_check = result
        return result

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_chore(
        self,
        title: str,
        assignee: str = UNASSIGNED,
        frequency: Frequency = Frequency.DAILY,
        weekly_days: Iterable[int] | None = None,
        due_date: int | None = None,
    ) -> Chore | None:
        """Create a chore; a new assignee name creates a family member."""
        if not title.strip():
            return None
        members, name = chore_engine.resolve_assignee(self.members, assignee)
        chores = chore_engine.create_chore(
            self.chores, title, name, frequency, weekly_days, due_date, now=self.now(),
        )
        self._apply(chores, members)
        return chores[0]

    def edit_chore(self, chore_id: str, **fields) -> None:
        if not any(c.id == chore_id for c in self.chores):
            logger.debug("Ignoring edit of unknown chore %s", chore_id)
            return
        members = self.members
        if "assignee" in fields:
            members, fields["assignee"] = chore_engine.resolve_assignee(
                self.members, fields["assignee"],
            )
        chores = chore_engine.edit_chore(self.chores, chore_id, **fields)
        self._apply(chores, members)

    def remove_chore(self, chore_id: str) -> None:
        self._apply(chore_engine.remove_chore(self.chores, chore_id), self.members)

    def toggle_chore(self, chore_id: str) -> None:
        self._apply(
            chore_engine.toggle_standard(self.chores, chore_id, self.now()), self.members,
        )

    def toggle_weekly_day(self, chore_id: str, day_index: int) -> None:
        self._apply(
            chore_engine.toggle_weekly_day(self.chores, chore_id, day_index, self.now()),
            self.members,
        )

    def _apply(self, chores: list[Chore], members: list[FamilyMember]) -> None:
        if chores == self.chores and members == self.members:
            return
        self.chores = chores
        self.members = members
        self._mark_changed()

    def _mark_changed(self) -> None:
        self._dirty = True
        self._cache.save(self.chores, self.members)
        self.schedule_sync()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def is_completed(self, chore: Chore) -> bool:
        return is_completed(chore, self.now())

    def visible_chores(self, tab: str = "all") -> list[Chore]:
        return filter_chores(self.chores, tab, self.now())

    # ------------------------------------------------------------------
    # Pushing
    # ------------------------------------------------------------------

    def schedule_sync(self) -> None:
        """(Re)start the debounce timer; only the last state of a burst is pushed."""
        if not self.sharing_code or not self.loaded:
            return
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, sync deferred until flush()")
            return

        if self._debounce_task is not None:
            self._debounce_task.cancel()
        self._debounce_task = self._spawn(self._debounced_push())

    async def _debounced_push(self) -> None:
        await asyncio.sleep(self._debounce)
        # From here on the push is in flight and must not be cancelled by new edits.
        self._debounce_task = None
        await self.sync_now()

    async def sync_now(self) -> bool:
        """Push the full current state. Also used for manual retry."""
        if not self.sharing_code:
            return False

        self._sync_seq += 1
        seq = self._sync_seq
        code, chores, members = self.sharing_code, list(self.chores), list(self.members)
        self._dirty = False
        self.status = SyncStatus.SYNCING
        self._cache.save(chores, members)

        try:
            ok = await self._remote.save_family_data(code, chores, members)
            error = "" if ok else "Remote store did not accept the update"
        except Exception as exc:
            logger.warning("Sync #%d for %s failed: %s", seq, code, exc)
            ok, error = False, str(exc) or exc.__class__.__name__

        if seq != self._sync_seq:
            logger.debug("Ignoring result of superseded sync #%d", seq)
            return ok

        if ok:
            self.status = SyncStatus.SUCCESS
            self.last_sync = self.now()
            self.last_error = ""
        else:
            self.status = SyncStatus.ERROR
            self.last_error = error
        self._schedule_status_reset(seq)
        return ok

    async def retry(self) -> bool:
        return await self.sync_now()

    def _schedule_status_reset(self, seq: int) -> None:
        if self._reset_task is not None:
            self._reset_task.cancel()
        self._reset_task = self._spawn(self._reset_status_later(seq))

    async def _reset_status_later(self, seq: int) -> None:
        await asyncio.sleep(self._status_reset)
        if seq == self._sync_seq and self.status in (SyncStatus.SUCCESS, SyncStatus.ERROR):
            self.status = SyncStatus.IDLE

    async def flush(self) -> None:
        """Push pending changes now instead of waiting for the debounce."""
        if self._debounce_task is not None:
            self._debounce_task.cancel()
            self._debounce_task = None
        if self._dirty and self.sharing_code and self.loaded:
            await self.sync_now()

    async def aclose(self) -> None:
        """Flush pending changes and wait for in-flight pushes."""
        await self.flush()
        in_flight = [t for t in self._background if t is not self._reset_task]
        if in_flight:
            await asyncio.gather(*in_flight, return_exceptions=True)
        self._cancel_timers()

    def _cancel_timers(self) -> None:
        for task in (self._debounce_task, self._reset_task):
            if task is not None:
                task.cancel()
        self._debounce_task = None
        self._reset_task = None

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._task_done)
        return task

    def _task_done(self, task: asyncio.Task) -> None:
        self._background.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Background sync task failed", exc_info=task.exception())
