"""Core configuration, registries and startup wiring for imagefit."""

from .config import ConfigSource, project_config_map
from .constants import (
    DEFAULT_FORMAT,
    DEFAULT_QUALITY,
    DEFAULT_SHARD_DEPTH,
    DEFAULT_SHARD_WIDTH,
)
from .logging_config import get_logger, setup_logger
from .exceptions import (
    ImagefitError,
    ConfigurationError,
    ConfigurationProjectionError,
    RegistryError,
    UnregisteredBackendType,
    DuplicateBackendType,
    RegistryFrozenError,
    BackendConstructionError,
    ReportingClientConstructionError,
    StorageError,
    StorageNotFound,
    KVStoreError,
    ImageProcessingError,
    InitializationError,
    IncompleteApplicationState,
    FrozenApplicationStateError,
    with_error_handling,
)
from .models import ShardPolicy
from .registry import BackendRegistry

__all__ = [
    "ConfigSource",
    "project_config_map",
    "DEFAULT_FORMAT",
    "DEFAULT_QUALITY",
    "DEFAULT_SHARD_DEPTH",
    "DEFAULT_SHARD_WIDTH",
    "setup_logger",
    "get_logger",
    "ImagefitError",
    "ConfigurationError",
    "ConfigurationProjectionError",
    "RegistryError",
    "UnregisteredBackendType",
    "DuplicateBackendType",
    "RegistryFrozenError",
    "BackendConstructionError",
    "ReportingClientConstructionError",
    "StorageError",
    "StorageNotFound",
    "KVStoreError",
    "ImageProcessingError",
    "InitializationError",
    "IncompleteApplicationState",
    "FrozenApplicationStateError",
    "with_error_handling",
    "ShardPolicy",
    "BackendRegistry",
]
