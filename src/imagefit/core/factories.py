"""Factories for backends, clients and loggers used during initialization."""

import logging
from enum import Enum
from typing import Any, Mapping, Optional

import boto3

from ..backends.kvstores import InMemoryKVStore, RedisKVStore
from ..backends.storages import FileSystemStorage, S3Storage
from .constants import (
    DEFAULT_CACHE_MAX_ENTRIES,
    DEFAULT_REDIS_CONNECT_TIMEOUT,
    DEFAULT_REDIS_HOST,
    DEFAULT_REDIS_PORT,
    DEFAULT_S3_ACL,
)
from .exceptions import BackendConstructionError
from .observability import StructuredLogger
from .protocols import S3ClientProtocol
from .registry import BackendRegistry


class KVStoreKind(str, Enum):
    """Built-in key-value store types."""

    REDIS = "redis"
    CACHE = "cache"


class StorageKind(str, Enum):
    """Built-in blob storage types."""

    HTTP_S3 = "http+s3"
    S3 = "s3"
    HTTP_FS = "http+fs"
    FS = "fs"


class LoggerFactory:
    """Factory for creating logger instances."""

    @staticmethod
    def create_logger(name: str, level: int = logging.INFO) -> StructuredLogger:
        """Create a configured structured logger."""
        return StructuredLogger(name, level)


class S3ClientFactory:
    """Factory for creating S3 client instances."""

    @staticmethod
    def create_s3_client(**kwargs: Any) -> S3ClientProtocol:
        """Create S3 client with optional configuration."""
        session = boto3.Session()
        return session.client("s3", **kwargs)  # type: ignore


def _require(config: Mapping[str, str], key: str, registry: str, type_id: str) -> str:
    value = config.get(key, "")
    if not value:
        raise BackendConstructionError(registry, type_id, f"missing required option '{key}'")
    return value


def _int_option(
    config: Mapping[str, str], key: str, default: int, registry: str, type_id: str
) -> int:
    raw = config.get(key, "")
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise BackendConstructionError(
            registry, type_id, f"option '{key}' must be an integer, got {raw!r}"
        ) from None


def _float_option(
    config: Mapping[str, str], key: str, default: float, registry: str, type_id: str
) -> float:
    raw = config.get(key, "")
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise BackendConstructionError(
            registry, type_id, f"option '{key}' must be a number, got {raw!r}"
        ) from None


# ==================== Key-value stores ====================


def build_cache_kvstore(config: Mapping[str, str]) -> InMemoryKVStore:
    max_entries = _int_option(
        config, "max_entries", DEFAULT_CACHE_MAX_ENTRIES, "kvstore", KVStoreKind.CACHE.value
    )
    if max_entries < 0:
        raise BackendConstructionError(
            "kvstore", KVStoreKind.CACHE.value, "option 'max_entries' must be >= 0"
        )
    return InMemoryKVStore(max_entries=max_entries)


def build_redis_kvstore(config: Mapping[str, str]) -> RedisKVStore:
    """Connect to Redis; the connection attempt is bounded by ``connect_timeout``."""
    type_id = KVStoreKind.REDIS.value
    return RedisKVStore.connect(
        host=config.get("host") or DEFAULT_REDIS_HOST,
        port=_int_option(config, "port", DEFAULT_REDIS_PORT, "kvstore", type_id),
        db=_int_option(config, "db", 0, "kvstore", type_id),
        password=config.get("password") or None,
        connect_timeout=_float_option(
            config, "connect_timeout", DEFAULT_REDIS_CONNECT_TIMEOUT, "kvstore", type_id
        ),
    )


# ==================== Blob storages ====================


def _fs_storage(config: Mapping[str, str], type_id: str, require_url: bool) -> FileSystemStorage:
    location = config.get("location") or config.get("path")
    if not location:
        raise BackendConstructionError(
            "storage", type_id, "missing required option 'location'"
        )
    base_url: Optional[str] = config.get("base_url") or None
    if require_url:
        base_url = _require(config, "base_url", "storage", type_id)
    return FileSystemStorage(location, base_url=base_url)


def build_fs_storage(config: Mapping[str, str]) -> FileSystemStorage:
    return _fs_storage(config, StorageKind.FS.value, require_url=False)


def build_http_fs_storage(config: Mapping[str, str]) -> FileSystemStorage:
    return _fs_storage(config, StorageKind.HTTP_FS.value, require_url=True)


def _s3_storage(config: Mapping[str, str], type_id: str, require_url: bool) -> S3Storage:
    bucket = _require(config, "bucket_name", "storage", type_id)
    base_url: Optional[str] = config.get("base_url") or None
    if require_url:
        base_url = _require(config, "base_url", "storage", type_id)

    client_kwargs = {
        "region_name": config.get("region") or None,
        "aws_access_key_id": config.get("access_key_id") or None,
        "aws_secret_access_key": config.get("secret_access_key") or None,
    }
    client = S3ClientFactory.create_s3_client(
        **{key: value for key, value in client_kwargs.items() if value is not None}
    )
    return S3Storage(
        client,
        bucket,
        location=config.get("location", ""),
        acl=config.get("acl") or DEFAULT_S3_ACL,
        base_url=base_url,
    )


def build_s3_storage(config: Mapping[str, str]) -> S3Storage:
    return _s3_storage(config, StorageKind.S3.value, require_url=False)


def build_http_s3_storage(config: Mapping[str, str]) -> S3Storage:
    return _s3_storage(config, StorageKind.HTTP_S3.value, require_url=True)


# ==================== Registries ====================

KV_STORES = BackendRegistry("kvstore")
KV_STORES.register(KVStoreKind.REDIS.value, build_redis_kvstore)
KV_STORES.register(KVStoreKind.CACHE.value, build_cache_kvstore)
KV_STORES.freeze()

STORAGES = BackendRegistry("storage")
STORAGES.register(StorageKind.HTTP_S3.value, build_http_s3_storage)
STORAGES.register(StorageKind.S3.value, build_s3_storage)
STORAGES.register(StorageKind.HTTP_FS.value, build_http_fs_storage)
STORAGES.register(StorageKind.FS.value, build_fs_storage)
STORAGES.freeze()
