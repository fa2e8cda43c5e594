"""
Family Chores: Local Cache Store.

Typed access to the three cache slots (chores, members, sharing code) on
top of any StoragePort. The cache is a mirror of the in-memory state, not a
source of truth: it is written on every change and read back only when the
remote store cannot be reached.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.data.models import Chore, FamilyData, FamilyMember
from src.integrations.sheets_codec import (
    decode_chores,
    decode_members,
    dump_chores,
    dump_members,
    load_json_rows,
)
from src.ports.storage_port import CHORES_SLOT, MEMBERS_SLOT, SHARING_CODE_SLOT

if TYPE_CHECKING:
    from src.ports.storage_port import StoragePort

logger = logging.getLogger(__name__)


class LocalCache:
    """Reads and writes family data through a StoragePort."""

    def __init__(self, storage: StoragePort) -> None:
        self._storage = storage

    # -- sharing code -------------------------------------------------------

    def get_sharing_code(self) -> str:
        return self._storage.get(SHARING_CODE_SLOT) or ""

    def set_sharing_code(self, code: str) -> None:
        self._storage.set(SHARING_CODE_SLOT, code)

    # -- family data --------------------------------------------------------

    def save(self, chores: list[Chore], members: list[FamilyMember]) -> None:
        """Write both collections, one slot each."""
        self._storage.set(CHORES_SLOT, dump_chores(chores))
        self._storage.set(MEMBERS_SLOT, dump_members(members))

    def load(self) -> FamilyData:
        """Read the cached collections; missing or corrupt slots are empty."""
        chores, chore_diags = decode_chores(
            load_json_rows(self._storage.get(CHORES_SLOT), "chores")
        )
        members, member_diags = decode_members(
            load_json_rows(self._storage.get(MEMBERS_SLOT), "members")
        )
        diagnostics = chore_diags + member_diags
        for message in diagnostics:
            logger.warning("Local cache: %s", message)
        return FamilyData(
            chores=chores, members=members, source="cache", diagnostics=diagnostics,
        )

    def clear(self) -> None:
        """Forget the sharing code and all cached data."""
        for slot in (SHARING_CODE_SLOT, CHORES_SLOT, MEMBERS_SLOT):
            self._storage.clear(slot)
        logger.info("Local cache cleared")
