"""
Key-Value Store Module

Small async key-value stores holding per-browser client state: view gate
timestamps (durable) and the tab session identifier (short lived).
Redis-backed in production, in-memory otherwise and in tests.
"""

import logging
import time
from abc import ABC, abstractmethod

import redis.asyncio as redis

from devfolio.utils.metrics import REDIS_CONNECTED

logger = logging.getLogger(__name__)

# KEYS[1] = key; ARGV = now, interval, ttl seconds ("0" for none)
SET_IF_OLDER_SCRIPT = """
local previous = tonumber(redis.call('GET', KEYS[1]))
if previous and tonumber(ARGV[1]) - previous <= tonumber(ARGV[2]) then
    return 0
end
if tonumber(ARGV[3]) > 0 then
    redis.call('SET', KEYS[1], ARGV[1], 'EX', ARGV[3])
else
    redis.call('SET', KEYS[1], ARGV[1])
end
return 1
"""


def _as_int(key: str, value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Discarding unreadable value for {key}: {value!r}")
        return None


class KeyValueStore(ABC):
    """String key-value store with get/set/delete"""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value or None."""

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove a key if present."""

    @abstractmethod
    async def set_if_older(self, key: str, now: int, interval: int) -> bool:
        """
        Atomically store now unless the stored integer is within interval of it.

        Returns True when the value was written. A stored value that is not
        an integer counts as absent.
        """


class MemoryStore(KeyValueStore):
    """
    In-memory store.

    Values are lost on restart and not shared across workers, which is
    fine for tests and single-process development.
    """

    def __init__(self, ttl: int | None = None):
        self._data: dict[str, tuple[str, float | None]] = {}
        self._ttl = ttl

    def _expired(self, expires_at: float | None) -> bool:
        return expires_at is not None and expires_at <= time.time()

    def _read(self, key: str) -> str | None:
        item = self._data.get(key)
        if item is None:
            return None
        value, expires_at = item
        if self._expired(expires_at):
            del self._data[key]
            return None
        return value

    def _write(self, key: str, value: str) -> None:
        expires_at = time.time() + self._ttl if self._ttl else None
        self._data[key] = (value, expires_at)

    async def get(self, key: str) -> str | None:
        return self._read(key)

    async def set(self, key: str, value: str) -> None:
        self._write(key, value)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def set_if_older(self, key: str, now: int, interval: int) -> bool:
        # Synchronous read and write, so this is atomic on the event loop
        previous = _as_int(key, self._read(key))
        if previous is not None and now - previous <= interval:
            return False
        self._write(key, str(now))
        return True

    def __len__(self) -> int:
        return len(self._data)


class RedisStore(KeyValueStore):
    """
    Redis-backed store.

    Keys are prefixed; an optional TTL bounds short-lived data such as tab
    session identifiers. Connection errors are logged and degrade to
    "no value" so that callers keep working without client state.
    """

    def __init__(self, url: str, prefix: str, ttl: int | None = None, role: str = "store"):
        self._url = url
        self._prefix = prefix
        self._ttl = ttl
        self._role = role
        self._redis: redis.Redis | None = None
        self._last_connect_attempt: float = 0  # failed connects are retried after RETRY_SECONDS

    RETRY_SECONDS = 30

    async def connect(self) -> None:
        if self._redis is not None:
            return
        if self._last_connect_attempt and time.time() - self._last_connect_attempt < self.RETRY_SECONDS:
            return
        self._last_connect_attempt = time.time()
        try:
            self._redis = redis.Redis.from_url(self._url, decode_responses=True)
            await self._redis.ping()
            self._last_connect_attempt = 0
            REDIS_CONNECTED.labels(role=self._role).set(1)
            logger.info(f"KV store ({self._role}): connected to Redis")
        except Exception as e:
            REDIS_CONNECTED.labels(role=self._role).set(0)
            logger.warning(f"KV store ({self._role}): failed to connect to Redis: {e}")
            self._redis = None

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None
            REDIS_CONNECTED.labels(role=self._role).set(0)
            logger.info(f"KV store ({self._role}): disconnected from Redis")

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> str | None:
        if self._redis is None:
            await self.connect()
        if self._redis is None:
            return None
        try:
            return await self._redis.get(self._key(key))
        except Exception as e:
            logger.warning(f"KV store get error for {key}: {e}")
            return None

    async def set(self, key: str, value: str) -> None:
        if self._redis is None:
            await self.connect()
        if self._redis is None:
            return
        try:
            if self._ttl:
                await self._redis.setex(self._key(key), self._ttl, value)
            else:
                await self._redis.set(self._key(key), value)
        except Exception as e:
            logger.warning(f"KV store set error for {key}: {e}")

    async def set_if_older(self, key: str, now: int, interval: int) -> bool:
        """Server-side compare-and-set; without Redis every call is allowed."""
        if self._redis is None:
            await self.connect()
        if self._redis is None:
            return True
        try:
            written = await self._redis.eval(
                SET_IF_OLDER_SCRIPT, 1, self._key(key), now, interval, self._ttl or 0
            )
            return bool(written)
        except Exception as e:
            logger.warning(f"KV store set_if_older error for {key}: {e}")
            return True

    async def delete(self, key: str) -> None:
        if self._redis is None:
            return
        try:
            await self._redis.delete(self._key(key))
        except Exception as e:
            logger.warning(f"KV store delete error for {key}: {e}")


class NamespacedStore(KeyValueStore):
    """View of another store with every key scoped under a namespace"""

    def __init__(self, store: KeyValueStore, namespace: str):
        self._store = store
        self._namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    async def get(self, key: str) -> str | None:
        return await self._store.get(self._key(key))

    async def set(self, key: str, value: str) -> None:
        await self._store.set(self._key(key), value)

    async def delete(self, key: str) -> None:
        await self._store.delete(self._key(key))

    async def set_if_older(self, key: str, now: int, interval: int) -> bool:
        return await self._store.set_if_older(self._key(key), now, interval)
