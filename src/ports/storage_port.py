"""Storage port: abstract key-value interface for the local cache.

Core modules depend on this protocol, never on a specific backend.
Each named slot is read and written atomically on its own; there is no
transaction spanning several slots.
"""

from __future__ import annotations

from typing import Protocol

CHORES_SLOT = "family_chores_local_cache"
MEMBERS_SLOT = "family_members_local_cache"
SHARING_CODE_SLOT = "family_chores_sharing_code"


class StoragePort(Protocol):
    """Abstract slot storage used by the local cache and the orchestrator."""

    def get(self, slot: str) -> str | None: ...

    def set(self, slot: str, value: str) -> None: ...

    def clear(self, slot: str) -> None: ...
