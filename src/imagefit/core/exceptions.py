"""Custom exceptions and error handling utilities for imagefit."""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from .logging_config import get_logger


class ImagefitError(Exception):
    """Base exception for all imagefit errors."""


class ConfigurationError(ImagefitError):
    """Error raised for invalid configuration options."""


class ConfigurationProjectionError(ConfigurationError):
    """A configuration sub-tree could not be flattened into a string map."""

    def __init__(self, namespace: str, key: Optional[str] = None, reason: str = ""):
        self.namespace = namespace
        self.key = key
        where = f"{namespace}.{key}" if key else namespace
        message = f"Cannot project configuration section '{where}' to a string map"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RegistryError(ImagefitError):
    """Base error for backend registry misuse."""


class UnregisteredBackendType(RegistryError):
    """Requested backend type is absent from a registry."""

    def __init__(self, registry: str, type_id: str):
        self.registry = registry
        self.type_id = type_id
        super().__init__(f"{registry} backend type '{type_id}' is not registered")


class DuplicateBackendType(RegistryError):
    """Backend type registered twice in the same registry."""

    def __init__(self, registry: str, type_id: str):
        self.registry = registry
        self.type_id = type_id
        super().__init__(f"{registry} backend type '{type_id}' is already registered")


class RegistryFrozenError(RegistryError):
    """Registration attempted after the registry was frozen."""


class BackendConstructionError(ImagefitError):
    """A backend factory failed to build its backend."""

    def __init__(self, registry: str, type_id: str, reason: Any):
        self.registry = registry
        self.type_id = type_id
        super().__init__(f"Failed to construct {registry} backend '{type_id}': {reason}")


class ReportingClientConstructionError(ImagefitError):
    """The error-reporting client could not be created."""


class StorageError(ImagefitError):
    """Error raised by a blob storage operation."""


class StorageNotFound(StorageError):
    """The requested blob does not exist."""


class KVStoreError(ImagefitError):
    """Error raised by a key-value store operation."""


class ImageProcessingError(ImagefitError):
    """Error raised when decoding, transforming or encoding an image fails."""


class InitializationError(ImagefitError):
    """Base error for application state lifecycle problems."""


class IncompleteApplicationState(InitializationError):
    """Pipeline finished but required state fields are still unset."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Application state incomplete, missing: {', '.join(missing)}")


class FrozenApplicationStateError(InitializationError, AttributeError):
    """Attempted to mutate application state after initialization."""


F = TypeVar("F", bound=Callable[..., Any])


def with_error_handling(
    error_cls: Callable[[Exception], ImagefitError] = lambda exc: ImageProcessingError(str(exc)),
) -> Callable[[F], F]:
    """Wrap a function so unexpected exceptions surface as imagefit errors.

    ``ImagefitError`` subclasses pass through untouched. Anything else is
    logged and re-raised as ``error_cls(exc)`` chained to the original.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger = get_logger("imagefit.errors")
            try:
                return func(*args, **kwargs)
            except ImagefitError:
                raise
            except Exception as exc:  # noqa: BLE001
                logger.error(f"Unhandled error in {func.__name__}: {exc}", exc_info=True)
                raise error_cls(exc) from exc

        return wrapper  # type: ignore[return-value]

    return decorator
