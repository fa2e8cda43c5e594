"""Spreadsheet proxy adapter: implements RemotePort over HTTP.

Talks to a spreadsheet web app that stores one row per chore and one row
per member, partitioned by sharing code:

- GET  ?sharingCode=CODE            → {"data": [...], "members": [...]}
- GET  ?sharingCode=CODE&test=true  → {"status": "ok", "message": ..., "count": n}
- POST {"action": "sync", "sharingCode", "chores", "members"}
                                    → {"success": true, "count": n}

Any failure response is {"error": "..."}. The web app answers through a
redirect, so redirects are followed. Every failure is raised as SyncError,
except in test_connection, which reports it in its result instead.
"""

from __future__ import annotations

import json
import logging

import httpx

from src.data.models import Chore, ConnectionResult, FamilyData, FamilyMember
from src.integrations.sheets_codec import decode_family_payload, encode_chore, encode_member
from src.ports.remote_port import SyncError

logger = logging.getLogger(__name__)


class SheetsProxyAdapter:
    """HTTP implementation of RemotePort."""

    def __init__(self, proxy_url: str | None = None, timeout: float | None = None) -> None:
        if proxy_url is None or timeout is None:
            from src.config import settings
            proxy_url = proxy_url or settings.SHEETS_PROXY_URL
            timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT_SECONDS

        self._url = proxy_url
        self._timeout = timeout

    async def _request(self, method: str, **kwargs) -> dict:
        """Send one request and return the decoded JSON object."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                resp = await client.request(method, self._url, **kwargs)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPError as exc:
            raise SyncError(f"Network error: {exc}") from exc
        except ValueError as exc:
            raise SyncError("Proxy returned invalid JSON") from exc

        if not isinstance(data, dict):
            raise SyncError(f"Unexpected proxy response: {type(data).__name__}")
        return data

    async def load_family_data(self, sharing_code: str) -> FamilyData:
        """Load every chore and member stored under a sharing code."""
        logger.info("Loading family data for %s", sharing_code)
        data = await self._request("GET", params={"sharingCode": sharing_code})

        if data.get("error"):
            raise SyncError(f"Proxy error: {data['error']}")

        family = decode_family_payload(data)
        for message in family.diagnostics:
            logger.warning("Remote row for %s: %s", sharing_code, message)

        logger.info(
            "Loaded %d chores and %d members for %s",
            len(family.chores), len(family.members), sharing_code,
        )
        return family

    async def save_family_data(
        self,
        sharing_code: str,
        chores: list[Chore],
        members: list[FamilyMember],
    ) -> bool:
        """Replace everything stored under a sharing code.

        The proxy acknowledges with the number of chore rows it wrote; a
        count that differs from what was sent is a failed sync.
        """
        logger.info(
            "Syncing %d chores and %d members for %s",
            len(chores), len(members), sharing_code,
        )
        payload = {
            "action": "sync",
            "sharingCode": sharing_code,
            "chores": [encode_chore(c) for c in chores],
            "members": [encode_member(m) for m in members],
        }
        data = await self._request(
            "POST",
            content=json.dumps(payload),
            headers={"Content-Type": "text/plain"},
        )

        if data.get("error"):
            raise SyncError(f"Proxy error: {data['error']}")

        count = data.get("count")
        if count is not None and count != len(chores):
            raise SyncError(f"Proxy acknowledged {count} of {len(chores)} chores")

        logger.info("Sync acknowledged for %s", sharing_code)
        return True

    async def test_connection(self, sharing_code: str) -> ConnectionResult:
        """Lightweight liveness probe; never raises."""
        logger.info("Testing connection for %s", sharing_code)
        try:
            data = await self._request(
                "GET", params={"sharingCode": sharing_code, "test": "true"},
            )
        except SyncError as exc:
            logger.warning("Connection test failed: %s", exc)
            return ConnectionResult(success=False, message=str(exc))

        if data.get("error"):
            return ConnectionResult(success=False, message=str(data["error"]))

        count = data.get("count")
        if count is None:
            count = len(data.get("data") or [])
        return ConnectionResult(
            success=True, message=f"Connected to Sheet. Found {count} chores.",
        )
