"""Remote port: abstract interface to the shared family data store.

Core modules depend on this protocol, never on a specific provider.
"""

from __future__ import annotations

from typing import Protocol

from src.data.models import Chore, ConnectionResult, FamilyData, FamilyMember


class SyncError(Exception):
    """Raised when any remote load/save operation fails."""


class RemotePort(Protocol):
    """Abstract remote store used by the sync orchestrator."""

    async def load_family_data(self, sharing_code: str) -> FamilyData: ...

    async def save_family_data(
        self,
        sharing_code: str,
        chores: list[Chore],
        members: list[FamilyMember],
    ) -> bool: ...

    async def test_connection(self, sharing_code: str) -> ConnectionResult: ...
