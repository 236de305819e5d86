"""Application state assembled by the initializer pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import ConfigSource
from .engine import ImageEngine
from .exceptions import FrozenApplicationStateError
from .models import ShardPolicy
from .protocols import BlobStorageProtocol, ErrorReporterProtocol, KVStoreProtocol

REQUIRED_FIELDS = (
    "engine",
    "source_storage",
    "dest_storage",
    "kv_store",
    "shard_policy",
    "error_reporter",
)


@dataclass
class ApplicationState:
    """
    Runtime wiring for request handling.

    Written by initializers only. Once the pipeline freezes it, any
    assignment raises ``FrozenApplicationStateError`` so the state can be
    shared between request threads without locking.
    """

    config: Optional[ConfigSource] = None
    engine: Optional[ImageEngine] = None
    source_storage: Optional[BlobStorageProtocol] = None
    dest_storage: Optional[BlobStorageProtocol] = None
    kv_store: Optional[KVStoreProtocol] = None
    key_prefix: str = ""
    shard_policy: Optional[ShardPolicy] = None
    secret_key: str = ""
    error_reporter: Optional[ErrorReporterProtocol] = None
    enable_upload: bool = False
    enable_delete: bool = False
    _frozen: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_frozen", False):
            raise FrozenApplicationStateError(
                f"Cannot set '{name}': application state is frozen"
            )
        super().__setattr__(name, value)

    def freeze(self) -> None:
        object.__setattr__(self, "_frozen", True)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_FIELDS if getattr(self, name) is None]

    def summary(self) -> Dict[str, Any]:
        """Human-readable description of the wiring, without secrets."""
        return {
            "engine": repr(self.engine),
            "source_storage": repr(self.source_storage),
            "dest_storage": repr(self.dest_storage),
            "shared_storage": self.dest_storage is self.source_storage,
            "kv_store": type(self.kv_store).__name__ if self.kv_store is not None else None,
            "key_prefix": self.key_prefix,
            "shard_policy": self.shard_policy.model_dump() if self.shard_policy else None,
            "secret_key_set": bool(self.secret_key),
            "error_reporting": getattr(self.error_reporter, "enabled", None),
            "enable_upload": self.enable_upload,
            "enable_delete": self.enable_delete,
        }
