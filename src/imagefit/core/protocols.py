"""Protocol definitions for the capabilities wired at startup."""

from typing import Any, Dict, Optional, Protocol


class S3ClientProtocol(Protocol):
    """Protocol for the subset of the S3 client used by storages."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Put object to S3."""
        ...

    def delete_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Delete object from S3."""
        ...

    def head_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Fetch object metadata from S3."""
        ...


class BlobStorageProtocol(Protocol):
    """Blob get/put/delete keyed by path."""

    def open(self, path: str) -> bytes:
        ...

    def save(self, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        ...

    def delete(self, path: str) -> None:
        ...

    def exists(self, path: str) -> bool:
        ...

    def url(self, path: str) -> Optional[str]:
        ...


class KVStoreProtocol(Protocol):
    """Key-value store used as a metadata/lookup cache."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...

    def exists(self, key: str) -> bool:
        ...


class ErrorReporterProtocol(Protocol):
    """Reports an error event with tags."""

    def report(self, error: BaseException, **tags: str) -> Optional[str]:
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log debug message."""
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log info message."""
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log warning message."""
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        """Log error message."""
        ...
