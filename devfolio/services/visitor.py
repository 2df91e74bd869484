"""
Visitor Identity Service

Anonymised visitor identity for view tracking: best-effort public IP
resolution, salted one-way hashing, and a tab-lifetime session identifier.
Raw IP addresses never leave this module unhashed.
"""

import hashlib
import logging
import secrets
import string
import time

import httpx

from devfolio.config import settings
from devfolio.exceptions import IPLookupError
from devfolio.utils.kv_store import KeyValueStore
from devfolio.utils.metrics import record_ip_lookup_fallback

logger = logging.getLogger(__name__)

SESSION_KEY = "blog-session-id"
_BASE36 = string.digits + string.ascii_lowercase


def hash_ip(value: str, salt: str | None = None) -> str:
    """
    Salted SHA-256 of a visitor address.

    Args:
        value: IP address (or fallback fingerprint)
        salt: Application salt (default: settings.ip_hash_salt)

    Returns:
        64 character lowercase hex digest
    """
    salt = settings.ip_hash_salt if salt is None else salt
    return hashlib.sha256(f"{value}{salt}".encode("utf-8")).hexdigest()


def fallback_identity(user_agent: str) -> str:
    """User agent plus the current epoch milliseconds. Not IP equivalent."""
    return f"{user_agent}{int(time.time() * 1000)}"


async def lookup_public_ip(client: httpx.AsyncClient, url: str | None = None) -> str:
    """Ask the lookup service for the caller's public IP; raises IPLookupError."""
    try:
        response = await client.get(url or settings.ip_lookup_url, timeout=settings.ip_lookup_timeout_seconds)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPError as e:
        raise IPLookupError(f"IP lookup request failed: {e}") from e
    except ValueError as e:
        raise IPLookupError("IP lookup returned invalid JSON") from e

    ip = data.get("ip") if isinstance(data, dict) else None
    if not isinstance(ip, str) or not ip:
        raise IPLookupError("IP lookup response has no 'ip'")
    return ip


async def get_client_ip(
    user_agent: str,
    client: httpx.AsyncClient | None = None,
    url: str | None = None,
) -> str:
    """
    Resolve the visitor's public IP, best effort.

    Any lookup failure falls back to fallback_identity(user_agent).
    """
    try:
        if client is not None:
            return await lookup_public_ip(client, url)
        async with httpx.AsyncClient() as own_client:
            return await lookup_public_ip(own_client, url)
    except IPLookupError as e:
        logger.debug(f"Falling back to user-agent identity: {e.message}")
        record_ip_lookup_fallback()
        return fallback_identity(user_agent)


def new_session_id() -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
    return f"session-{int(time.time() * 1000)}-{suffix}"


class SessionIdentity:
    """
    Tab-lifetime session identifier.

    Backed by a tab-scoped store; the identifier is generated lazily on first
    use and written exactly once for the lifetime of that store.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get_session_id(self) -> str:
        session_id = await self.store.get(SESSION_KEY)
        if not session_id:
            session_id = new_session_id()
            await self.store.set(SESSION_KEY, session_id)
        return session_id
