"""imagefit - startup configuration and backend selection for an image service."""

__version__ = "0.1.0"

from .core.config import ConfigSource
from .core.factories import KV_STORES, STORAGES, KVStoreKind, StorageKind
from .core.initializers import DEFAULT_INITIALIZERS, InitializerPipeline, initialize
from .core.state import ApplicationState

__all__ = [
    "__version__",
    "ConfigSource",
    "KV_STORES",
    "STORAGES",
    "KVStoreKind",
    "StorageKind",
    "DEFAULT_INITIALIZERS",
    "InitializerPipeline",
    "initialize",
    "ApplicationState",
]
