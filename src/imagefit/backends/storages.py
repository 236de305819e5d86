"""Blob storage backends: local filesystem and S3."""

from pathlib import Path, PurePosixPath
from typing import Optional, Union

from botocore.exceptions import ClientError

from ..core.exceptions import StorageError, StorageNotFound
from ..core.protocols import S3ClientProtocol

_MISSING_CODES = ("404", "NoSuchKey", "NotFound")


def _clean_path(path: str) -> str:
    """Normalize a storage path, rejecting anything that leaves the root."""
    parts = [part for part in PurePosixPath(path).parts if part not in ("/", ".")]
    if not parts:
        raise StorageError("Empty storage path")
    if ".." in parts:
        raise StorageError(f"Storage path escapes the storage root: {path}")
    return "/".join(parts)


def _join_url(base_url: Optional[str], path: str) -> Optional[str]:
    if not base_url:
        return None
    return f"{base_url.rstrip('/')}/{_clean_path(path)}"


class FileSystemStorage:
    """Stores blobs as files below ``location``."""

    def __init__(self, location: Union[str, Path], base_url: Optional[str] = None):
        self.location = Path(location)
        self.base_url = base_url or None

    def _full_path(self, path: str) -> Path:
        return self.location / _clean_path(path)

    def open(self, path: str) -> bytes:
        full_path = self._full_path(path)
        try:
            return full_path.read_bytes()
        except FileNotFoundError:
            raise StorageNotFound(f"{full_path} does not exist") from None
        except OSError as exc:
            raise StorageError(f"Cannot read {full_path}: {exc}") from exc

    def save(self, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        full_path = self._full_path(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Cannot write {full_path}: {exc}") from exc

    def delete(self, path: str) -> None:
        full_path = self._full_path(path)
        try:
            full_path.unlink()
        except FileNotFoundError:
            raise StorageNotFound(f"{full_path} does not exist") from None
        except OSError as exc:
            raise StorageError(f"Cannot delete {full_path}: {exc}") from exc

    def exists(self, path: str) -> bool:
        return self._full_path(path).is_file()

    def url(self, path: str) -> Optional[str]:
        return _join_url(self.base_url, path)

    def __repr__(self) -> str:
        return f"FileSystemStorage(location={str(self.location)!r}, base_url={self.base_url!r})"


class S3Storage:
    """Stores blobs as objects in an S3 bucket, optionally under a key prefix."""

    def __init__(
        self,
        client: S3ClientProtocol,
        bucket: str,
        location: str = "",
        acl: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        self._client = client
        self.bucket = bucket
        self.location = location.strip("/")
        self.acl = acl or None
        self.base_url = base_url or None

    def _key(self, path: str) -> str:
        key = _clean_path(path)
        if self.location:
            return f"{self.location}/{key}"
        return key

    @staticmethod
    def _is_missing(exc: ClientError) -> bool:
        return str(exc.response.get("Error", {}).get("Code")) in _MISSING_CODES

    def open(self, path: str) -> bytes:
        key = self._key(path)
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
            return response["Body"].read()
        except ClientError as exc:
            if self._is_missing(exc):
                raise StorageNotFound(f"s3://{self.bucket}/{key} does not exist") from exc
            raise StorageError(f"S3 get s3://{self.bucket}/{key} failed: {exc}") from exc

    def save(self, path: str, data: bytes, content_type: Optional[str] = None) -> None:
        key = self._key(path)
        params = {"Bucket": self.bucket, "Key": key, "Body": data}
        if content_type:
            params["ContentType"] = content_type
        if self.acl:
            params["ACL"] = self.acl
        try:
            self._client.put_object(**params)
        except ClientError as exc:
            raise StorageError(f"S3 put s3://{self.bucket}/{key} failed: {exc}") from exc

    def delete(self, path: str) -> None:
        key = self._key(path)
        try:
            self._client.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            raise StorageError(f"S3 delete s3://{self.bucket}/{key} failed: {exc}") from exc

    def exists(self, path: str) -> bool:
        key = self._key(path)
        try:
            self._client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if self._is_missing(exc):
                return False
            raise StorageError(f"S3 head s3://{self.bucket}/{key} failed: {exc}") from exc
        return True

    def url(self, path: str) -> Optional[str]:
        return _join_url(self.base_url, path)

    def __repr__(self) -> str:
        return f"S3Storage(bucket={self.bucket!r}, location={self.location!r})"
