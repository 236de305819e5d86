"""Concrete key-value store and blob storage backends."""

from .kvstores import InMemoryKVStore, RedisKVStore
from .storages import FileSystemStorage, S3Storage

__all__ = [
    "InMemoryKVStore",
    "RedisKVStore",
    "FileSystemStorage",
    "S3Storage",
]
