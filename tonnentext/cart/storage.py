"""
Durable storage for the cart session handle.

One opaque string under a fixed key; absence means "no active session".
"""
import json
import os
from pathlib import Path
from typing import Optional, Protocol

from tonnentext.config import StorefrontSettings
from tonnentext.logging import get_logger

logger = get_logger(__name__)

SESSION_STORAGE_KEY = "label_cart_id"


class TTL:
    """Time-to-live constants for persisted handles (seconds)."""

    CART_SESSION = 2592000  # 30 days


class SessionStorage(Protocol):
    async def get(self) -> Optional[str]: ...

    async def set(self, handle: str) -> None: ...

    async def delete(self) -> None: ...


class MemorySessionStorage:
    """Process-local storage. Survives nothing; used when persistence is off."""

    def __init__(self, handle: Optional[str] = None):
        self._handle = handle

    async def get(self) -> Optional[str]:
        return self._handle

    async def set(self, handle: str) -> None:
        self._handle = handle

    async def delete(self) -> None:
        self._handle = None


class FileSessionStorage:
    """JSON file on the local disk, shared by every process of this client."""

    def __init__(self, path: str | os.PathLike, key: str = SESSION_STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            logger.warning("Corrupted session file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data), encoding="utf-8")
        tmp.replace(self.path)

    async def get(self) -> Optional[str]:
        value = self._read().get(self.key)
        return str(value) if value else None

    async def set(self, handle: str) -> None:
        data = self._read()
        data[self.key] = handle
        self._write(data)

    async def delete(self) -> None:
        data = self._read()
        if data.pop(self.key, None) is not None:
            self._write(data)


class RedisSessionStorage:
    """Upstash Redis storage, namespaced per client."""

    def __init__(self, redis, client_id: str = "default", ttl: int = TTL.CART_SESSION):
        self.redis = redis
        self.key = f"{SESSION_STORAGE_KEY}:{client_id}"
        self.ttl = ttl

    async def get(self) -> Optional[str]:
        value = await self.redis.get(self.key)
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value or None

    async def set(self, handle: str) -> None:
        await self.redis.set(self.key, handle, ex=self.ttl)

    async def delete(self) -> None:
        await self.redis.delete(self.key)


def build_session_storage(settings: StorefrontSettings, client_id: str = "default") -> SessionStorage:
    """Redis when configured, else a file when CART_SESSION_FILE is set, else memory."""
    if settings.redis_configured:
        from upstash_redis.asyncio import Redis as AsyncRedis

        return RedisSessionStorage(
            AsyncRedis(url=settings.redis_url, token=settings.redis_token),
            client_id=client_id,
        )
    if settings.session_file:
        return FileSessionStorage(settings.session_file)
    logger.warning("No durable session storage configured; cart session is process-local")
    return MemorySessionStorage()
