"""Key-value store backends."""

import threading
from collections import OrderedDict
from typing import Any, Optional

import redis

from ..core.exceptions import KVStoreError


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        return value.encode("utf-8")
    return str(value).encode("utf-8")


class InMemoryKVStore:
    """Process-local LRU store. ``max_entries=0`` disables eviction."""

    def __init__(self, max_entries: int = 0):
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self.max_entries = max_entries
        self._data: "OrderedDict[str, bytes]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            if key not in self._data:
                return None
            self._data.move_to_end(key)
            return self._data[key]

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = _to_bytes(value)
            self._data.move_to_end(key)
            if self.max_entries and len(self._data) > self.max_entries:
                self._data.popitem(last=False)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def exists(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


class RedisKVStore:
    """Key-value store backed by a Redis server."""

    def __init__(self, client: "redis.Redis"):
        self._client = client

    @classmethod
    def connect(
        cls,
        host: str,
        port: int,
        db: int = 0,
        password: Optional[str] = None,
        connect_timeout: Optional[float] = None,
    ) -> "RedisKVStore":
        """Open a client and verify the server answers a PING."""
        client = redis.Redis(
            host=host,
            port=port,
            db=db,
            password=password or None,
            socket_connect_timeout=connect_timeout,
            socket_timeout=connect_timeout,
        )
        try:
            client.ping()
        except Exception:
            client.close()
            raise
        return cls(client)

    @property
    def client(self) -> "redis.Redis":
        return self._client

    def get(self, key: str) -> Optional[bytes]:
        try:
            return self._client.get(key)
        except redis.RedisError as exc:
            raise KVStoreError(f"Redis GET {key} failed: {exc}") from exc

    def set(self, key: str, value: Any) -> None:
        try:
            self._client.set(key, _to_bytes(value))
        except redis.RedisError as exc:
            raise KVStoreError(f"Redis SET {key} failed: {exc}") from exc

    def delete(self, key: str) -> None:
        try:
            self._client.delete(key)
        except redis.RedisError as exc:
            raise KVStoreError(f"Redis DEL {key} failed: {exc}") from exc

    def exists(self, key: str) -> bool:
        try:
            return bool(self._client.exists(key))
        except redis.RedisError as exc:
            raise KVStoreError(f"Redis EXISTS {key} failed: {exc}") from exc
