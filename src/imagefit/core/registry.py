"""Backend registries mapping type identifiers to factories."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping

from .exceptions import (
    BackendConstructionError,
    DuplicateBackendType,
    ImagefitError,
    RegistryFrozenError,
    UnregisteredBackendType,
)

logger = logging.getLogger(__name__)

BackendFactory = Callable[[Mapping[str, str]], Any]


class BackendRegistry:
    """
    Lookup table from backend type identifier to factory.

    Registries are filled once at import time and then frozen; lookups
    after that point are plain dict reads and need no locking.

    Usage:
        registry = BackendRegistry("kvstore")
        registry.register("cache", build_cache_kvstore)
        registry.freeze()

        store = registry.build("cache", {"max_entries": "100"})
    """

    def __init__(self, name: str):
        self.name = name
        self._factories: Dict[str, BackendFactory] = {}
        self._frozen = False

    def register(self, type_id: str, factory: BackendFactory) -> None:
        """Register ``factory`` under ``type_id``."""
        if self._frozen:
            raise RegistryFrozenError(
                f"{self.name} registry is frozen, cannot register '{type_id}'"
            )
        if type_id in self._factories:
            raise DuplicateBackendType(self.name, type_id)
        self._factories[type_id] = factory
        logger.debug(f"Registered {self.name} backend: {type_id}")

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def resolve(self, type_id: str) -> BackendFactory:
        """
        Get the factory registered under ``type_id``.

        Raises:
            UnregisteredBackendType: If nothing is registered under ``type_id``
        """
        try:
            return self._factories[type_id]
        except KeyError:
            raise UnregisteredBackendType(self.name, type_id) from None

    def build(self, type_id: str, config: Mapping[str, str]) -> Any:
        """
        Resolve ``type_id`` and invoke its factory with ``config``.

        Errors from the imagefit hierarchy propagate as raised; anything
        else becomes a ``BackendConstructionError`` chained to the cause.
        """
        factory = self.resolve(type_id)
        try:
            return factory(config)
        except ImagefitError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise BackendConstructionError(self.name, type_id, exc) from exc

    def types(self) -> List[str]:
        return list(self._factories)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def __repr__(self) -> str:
        return f"BackendRegistry({self.name!r}, types=[{', '.join(self._factories)}])"
