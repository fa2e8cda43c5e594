"""Tests for src.adapters.sheets_proxy: the HTTP remote store client."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.adapters.sheets_proxy import SheetsProxyAdapter
from src.core.chore_engine import make_member
from src.data.models import Chore, Frequency
from src.ports.remote_port import SyncError

URL = "https://proxy.example.test/exec"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_client(payload=None, side_effect=None):
    mock_resp = MagicMock()
    mock_resp.json.return_value = payload
    mock_resp.raise_for_status = MagicMock()

    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    if side_effect is not None:
        mock_client.request = AsyncMock(side_effect=side_effect)
    else:
        mock_client.request = AsyncMock(return_value=mock_resp)
    return mock_client


def _adapter():
    return SheetsProxyAdapter(proxy_url=URL, timeout=5)


# ---------------------------------------------------------------------------
# load_family_data
# ---------------------------------------------------------------------------


class TestLoadFamilyData:
    @pytest.mark.asyncio
    async def test_successful_load(self):
        mock_client = _mock_client({
            "data": [{
                "id": "1", "title": "Dishes", "assignee": "Mom", "frequency": "Daily",
                "completed": "TRUE", "createdAt": "1770000000000",
                "weeklyDays": "", "completionHistory": "[]",
            }],
            "members": [{"name": "Mom", "color": "bg-rose-500", "avatar": ""}],
        })
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            family = await _adapter().load_family_data("SWIFT-OTTER-1234")

        assert [c.title for c in family.chores] == ["Dishes"]
        assert family.chores[0].completed is True
        assert [m.name for m in family.members] == ["Mom"]
        assert family.source == "remote"
        mock_client.request.assert_awaited_once_with(
            "GET", URL, params={"sharingCode": "SWIFT-OTTER-1234"},
        )

    @pytest.mark.asyncio
    async def test_follows_redirects(self):
        mock_client = _mock_client({"data": [], "members": []})
        with patch(
            "src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client,
        ) as client_cls:
            await _adapter().load_family_data("CODE")
        assert client_cls.call_args.kwargs["follow_redirects"] is True

    @pytest.mark.asyncio
    async def test_error_payload_raises(self):
        mock_client = _mock_client({"error": "Missing sharingCode"})
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(SyncError, match="Missing sharingCode"):
                await _adapter().load_family_data("CODE")

    @pytest.mark.asyncio
    async def test_network_error_raises_sync_error(self):
        mock_client = _mock_client(side_effect=httpx.ConnectError("connection refused"))
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(SyncError, match="Network error"):
                await _adapter().load_family_data("CODE")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_sync_error(self):
        mock_client = _mock_client()
        mock_resp = MagicMock()
        mock_resp.raise_for_status = MagicMock()
        mock_resp.json.side_effect = json.JSONDecodeError("Expecting value", "<html>", 0)
        mock_client.request = AsyncMock(return_value=mock_resp)
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(SyncError, match="invalid JSON"):
                await _adapter().load_family_data("CODE")

    @pytest.mark.asyncio
    async def test_non_object_response_raises(self):
        mock_client = _mock_client(["not", "an", "object"])
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(SyncError):
                await _adapter().load_family_data("CODE")


# ---------------------------------------------------------------------------
# save_family_data
# ---------------------------------------------------------------------------


class TestSaveFamilyData:
    def _chores(self):
        return [
            Chore(id="1", title="Bins", frequency=Frequency.WEEKLY, weekly_days=(1, 3)),
            Chore(id="2", title="Dishes"),
        ]

    @pytest.mark.asyncio
    async def test_posts_full_payload(self):
        mock_client = _mock_client({"success": True, "count": 2})
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            ok = await _adapter().save_family_data("CODE", self._chores(), [make_member("Mom")])

        assert ok is True
        args, kwargs = mock_client.request.call_args
        assert args == ("POST", URL)
        assert kwargs["headers"] == {"Content-Type": "text/plain"}
        body = json.loads(kwargs["content"])
        assert body["action"] == "sync"
        assert body["sharingCode"] == "CODE"
        assert [c["id"] for c in body["chores"]] == ["1", "2"]
        assert body["chores"][0]["weeklyDays"] == [1, 3]
        assert body["members"][0]["name"] == "Mom"

    @pytest.mark.asyncio
    async def test_count_mismatch_raises(self):
        mock_client = _mock_client({"success": True, "count": 1})
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(SyncError, match="acknowledged 1 of 2"):
                await _adapter().save_family_data("CODE", self._chores(), [])

    @pytest.mark.asyncio
    async def test_missing_count_is_accepted(self):
        mock_client = _mock_client({"success": True})
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            assert await _adapter().save_family_data("CODE", self._chores(), []) is True

    @pytest.mark.asyncio
    async def test_error_payload_raises(self):
        mock_client = _mock_client({"error": "Invalid sync request payload"})
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(SyncError, match="Invalid sync request payload"):
                await _adapter().save_family_data("CODE", [], [])

    @pytest.mark.asyncio
    async def test_http_status_error_raises(self):
        mock_client = _mock_client({})
        request = httpx.Request("POST", URL)
        response = httpx.Response(500, request=request)
        mock_resp = MagicMock()
        mock_resp.raise_for_status = MagicMock(
            side_effect=httpx.HTTPStatusError("Server error", request=request, response=response),
        )
        mock_client.request = AsyncMock(return_value=mock_resp)
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            with pytest.raises(SyncError):
                await _adapter().save_family_data("CODE", [], [])


# ---------------------------------------------------------------------------
# test_connection
# ---------------------------------------------------------------------------


class TestTestConnection:
    @pytest.mark.asyncio
    async def test_ok_with_count(self):
        mock_client = _mock_client({"status": "ok", "message": "Service is alive", "count": 4})
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            result = await _adapter().test_connection("CODE")

        assert result.success is True
        assert result.message == "Connected to Sheet. Found 4 chores."
        mock_client.request.assert_awaited_once_with(
            "GET", URL, params={"sharingCode": "CODE", "test": "true"},
        )

    @pytest.mark.asyncio
    async def test_count_falls_back_to_data_length(self):
        mock_client = _mock_client({"data": [{}, {}]})
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            result = await _adapter().test_connection("CODE")
        assert result.message == "Connected to Sheet. Found 2 chores."

    @pytest.mark.asyncio
    async def test_error_payload(self):
        mock_client = _mock_client({"error": "Proxy GET Error: boom"})
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            result = await _adapter().test_connection("CODE")
        assert result.success is False
        assert result.message == "Proxy GET Error: boom"

    @pytest.mark.asyncio
    async def test_network_failure_does_not_raise(self):
        mock_client = _mock_client(side_effect=httpx.ConnectTimeout("timed out"))
        with patch("src.adapters.sheets_proxy.httpx.AsyncClient", return_value=mock_client):
            result = await _adapter().test_connection("CODE")
        assert result.success is False
        assert "timed out" in result.message


class TestDefaults:
    @patch("src.config.settings")
    def test_uses_settings_when_not_given(self, mock_settings):
        mock_settings.SHEETS_PROXY_URL = "https://from-settings.test/exec"
        mock_settings.HTTP_TIMEOUT_SECONDS = 9.0
        adapter = SheetsProxyAdapter()
        assert adapter._url == "https://from-settings.test/exec"
        assert adapter._timeout == 9.0
