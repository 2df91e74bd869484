"""
Tests for visitor identity: IP hashing, IP lookup and session identifiers
"""

import re

import httpx
import pytest

from devfolio.exceptions import IPLookupError
from devfolio.services.visitor import (
    SESSION_KEY,
    SessionIdentity,
    get_client_ip,
    hash_ip,
    lookup_public_ip,
    new_session_id,
)
from devfolio.utils.kv_store import MemoryStore

LOOKUP_URL = "https://ip.example.test/?format=json"


def lookup_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestHashIp:
    """Test salted IP hashing"""

    def test_hash_is_64_hex_chars(self):
        """Test the digest format"""
        assert re.fullmatch(r"[0-9a-f]{64}", hash_ip("198.51.100.23"))

    def test_hash_is_deterministic(self):
        """Test the same address always hashes the same"""
        assert hash_ip("198.51.100.23") == hash_ip("198.51.100.23")

    def test_hash_depends_on_salt(self):
        """Test a different salt yields a different digest"""
        assert hash_ip("198.51.100.23", salt="a") != hash_ip("198.51.100.23", salt="b")

    def test_hash_does_not_contain_ip(self):
        """Test the raw address is not recoverable from the digest text"""
        assert "198.51.100.23" not in hash_ip("198.51.100.23")


class TestIpLookup:
    """Test best-effort public IP resolution"""

    @pytest.mark.asyncio
    async def test_lookup_returns_ip(self):
        """Test the ip field of the lookup response is returned"""
        async with lookup_client(lambda request: httpx.Response(200, json={"ip": "198.51.100.23"})) as client:
            assert await lookup_public_ip(client, LOOKUP_URL) == "198.51.100.23"

    @pytest.mark.asyncio
    async def test_lookup_missing_ip_raises(self):
        """Test a response without ip is rejected"""
        async with lookup_client(lambda request: httpx.Response(200, json={"address": "x"})) as client:
            with pytest.raises(IPLookupError):
                await lookup_public_ip(client, LOOKUP_URL)

    @pytest.mark.asyncio
    async def test_lookup_invalid_json_raises(self):
        """Test a non-JSON body is rejected"""
        async with lookup_client(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(IPLookupError):
                await lookup_public_ip(client, LOOKUP_URL)

    @pytest.mark.asyncio
    async def test_get_client_ip_success(self):
        """Test get_client_ip returns the looked-up address"""
        async with lookup_client(lambda request: httpx.Response(200, json={"ip": "198.51.100.23"})) as client:
            assert await get_client_ip("Mozilla/5.0", client=client, url=LOOKUP_URL) == "198.51.100.23"

    @pytest.mark.asyncio
    async def test_get_client_ip_falls_back_on_http_error(self):
        """Test a failing lookup service yields the user-agent fallback"""
        async with lookup_client(lambda request: httpx.Response(503)) as client:
            value = await get_client_ip("Mozilla/5.0", client=client, url=LOOKUP_URL)

        assert value.startswith("Mozilla/5.0")
        assert value[len("Mozilla/5.0"):].isdigit()

    @pytest.mark.asyncio
    async def test_get_client_ip_falls_back_on_network_error(self):
        """Test a connection error yields the user-agent fallback"""

        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        async with lookup_client(handler) as client:
            value = await get_client_ip("curl/8.0", client=client, url=LOOKUP_URL)

        assert value.startswith("curl/8.0")

    @pytest.mark.asyncio
    async def test_get_client_ip_falls_back_on_malformed_response(self):
        """Test a response without ip yields the user-agent fallback"""
        async with lookup_client(lambda request: httpx.Response(200, json=[])) as client:
            value = await get_client_ip("curl/8.0", client=client, url=LOOKUP_URL)

        assert value.startswith("curl/8.0")


class TestSessionIdentity:
    """Test tab-lifetime session identifiers"""

    def test_session_id_format(self):
        """Test the identifier shape"""
        assert re.fullmatch(r"session-\d+-[0-9a-z]{9}", new_session_id())

    @pytest.mark.asyncio
    async def test_session_id_stable_within_tab(self):
        """Test repeated calls on the same tab store return the same id"""
        identity = SessionIdentity(MemoryStore())

        first = await identity.get_session_id()
        assert await identity.get_session_id() == first

    @pytest.mark.asyncio
    async def test_session_id_differs_across_tabs(self):
        """Test two tabs get different ids"""
        first = await SessionIdentity(MemoryStore()).get_session_id()
        second = await SessionIdentity(MemoryStore()).get_session_id()

        assert first != second

    @pytest.mark.asyncio
    async def test_session_id_persisted(self):
        """Test the id is written to the store under the session key"""
        store = MemoryStore()
        session_id = await SessionIdentity(store).get_session_id()

        assert await store.get(SESSION_KEY) == session_id
        assert await SessionIdentity(store).get_session_id() == session_id
