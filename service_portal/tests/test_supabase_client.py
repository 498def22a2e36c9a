"""
Tests for the Supabase data store adapter against a mocked transport.
"""

import json

import httpx
import pytest

from shared.errors import DataStoreError
from service_portal.app.adapters import Order, SupabaseDataStore


def make_store(handler):
    return SupabaseDataStore(
        "https://example.supabase.co/",
        "anon-key",
        transport=httpx.MockTransport(handler),
    )


class TestSupabaseDataStore:
    """Test cases for SupabaseDataStore."""

    @pytest.mark.asyncio
    async def test_single_select(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": "u1", "email": "leyla@example.com"})

        store = make_store(handler)
        row = await store.select("profiles", {"id": "u1"}, single=True)
        await store.stop()

        request = seen[0]
        assert row == {"id": "u1", "email": "leyla@example.com"}
        assert request.method == "GET"
        assert request.url.path == "/rest/v1/profiles"
        assert request.url.params["select"] == "*"
        assert request.url.params["id"] == "eq.u1"
        assert request.headers["Accept"] == "application/vnd.pgrst.object+json"
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_single_select_without_row_returns_none(self):
        def handler(request):
            return httpx.Response(406, json={"code": "PGRST116", "message": "JSON object requested, multiple (or no) rows returned"})

        store = make_store(handler)
        assert await store.select("profiles", {"id": "ghost"}, single=True) is None

    @pytest.mark.asyncio
    async def test_listing_with_order_and_filters(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[{"id": "news-1"}, {"id": "news-2"}])

        store = make_store(handler)
        rows = await store.select("news", {"published": True}, order=Order("date", ascending=False))

        assert [row["id"] for row in rows] == ["news-1", "news-2"]
        assert seen[0].url.params["order"] == "date.desc"
        assert seen[0].url.params["published"] == "eq.true"
        assert "Accept" not in seen[0].headers or seen[0].headers["Accept"] != "application/vnd.pgrst.object+json"

    @pytest.mark.asyncio
    async def test_update_sends_patch_with_representation(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"id": "u1", "name": "Leyla M."})

        store = make_store(handler)
        row = await store.update("profiles", {"id": "u1"}, {"name": "Leyla M."})

        request = seen[0]
        assert row["name"] == "Leyla M."
        assert request.method == "PATCH"
        assert request.headers["Prefer"] == "return=representation"
        assert request.url.params["id"] == "eq.u1"
        assert json.loads(request.content) == {"name": "Leyla M."}

    @pytest.mark.asyncio
    async def test_update_without_match_returns_none(self):
        def handler(request):
            return httpx.Response(406, json={"code": "PGRST116", "message": "no rows"})

        store = make_store(handler)
        assert await store.update("profiles", {"id": "ghost"}, {"name": "x"}) is None

    @pytest.mark.asyncio
    async def test_insert(self):
        def handler(request):
            body = json.loads(request.content)
            return httpx.Response(201, json={"id": "news-3", **body})

        store = make_store(handler)
        row = await store.insert("news", {"title": "Workshop"})

        assert row == {"id": "news-3", "title": "Workshop"}

    @pytest.mark.asyncio
    async def test_server_error_raises_data_store_error(self):
        def handler(request):
            return httpx.Response(500, json={"code": "XX000", "message": "internal error"})

        store = make_store(handler)
        with pytest.raises(DataStoreError) as exc_info:
            await store.select("profiles")

        assert exc_info.value.code == "DATA_STORE_ERROR"
        assert exc_info.value.details == {"table": "profiles", "status_code": 500, "code": "XX000"}
        assert "internal error" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_transport_error_raises_data_store_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        store = make_store(handler)
        with pytest.raises(DataStoreError) as exc_info:
            await store.select("profiles")

        assert exc_info.value.details["method"] == "GET"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_delete_requires_filters(self):
        def handler(request):
            raise AssertionError("no request expected")

        store = make_store(handler)
        with pytest.raises(DataStoreError):
            await store.delete("news", {})

    @pytest.mark.asyncio
    async def test_health_check(self):
        store = make_store(lambda request: httpx.Response(200, json={}))
        assert await store.health_check() is True

        failing = make_store(lambda request: httpx.Response(503))
        assert await failing.health_check() is False
