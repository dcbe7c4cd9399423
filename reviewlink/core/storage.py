"""
Blob storage backends.

The review core only ever reads and writes whole blobs, addressed by a kind
and a key. Metadata and comment blobs are keyed by project slug; video and
thumbnail blobs are keyed by their filename.
"""

import os
import tempfile
from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Tuple

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from reviewlink.config import (
    R2_ACCESS_KEY_ID,
    R2_BUCKET_NAME,
    R2_ENDPOINT_URL,
    R2_PREFIX,
    R2_SECRET_ACCESS_KEY,
    logger,
)
from reviewlink.core.exceptions import BlobNotFoundError, StorageError


class BlobKind(str, Enum):
    """Record kinds held by a blob store."""
    METADATA = "metadata"
    COMMENTS = "comments"
    VIDEO = "video"
    THUMBNAIL = "thumbnail"


class BlobStore(ABC):
    """Key-value persistence for whole blobs, atomic per record only."""

    @abstractmethod
    def get(self, kind: BlobKind, key: str) -> bytes:
        """Return the blob or raise BlobNotFoundError."""

    @abstractmethod
    def put(self, kind: BlobKind, key: str, data: bytes) -> None:
        """Create or replace the blob."""

    @abstractmethod
    def delete(self, kind: BlobKind, key: str) -> None:
        """Remove the blob or raise BlobNotFoundError."""

    @abstractmethod
    def list(self, kind: BlobKind) -> List[str]:
        """Return every key of the given kind."""

    def exists(self, kind: BlobKind, key: str) -> bool:
        try:
            self.get(kind, key)
        except BlobNotFoundError:
            return False
        return True


# -----------------------------------------------------------------------------
# Local filesystem
# -----------------------------------------------------------------------------

# uploads/<dir>/<key><suffix>
_LOCAL_LAYOUT: Dict[BlobKind, Tuple[str, str]] = {
    BlobKind.METADATA: ("metadata", ".json"),
    BlobKind.COMMENTS: ("comments", ".json"),
    BlobKind.VIDEO: ("videos", ""),
    BlobKind.THUMBNAIL: ("thumbnails", ""),
}


class LocalBlobStore(BlobStore):
    """Stores blobs as files below an uploads directory."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _dir(self, kind: BlobKind) -> Path:
        return self.root / _LOCAL_LAYOUT[kind][0]

    def _path(self, kind: BlobKind, key: str) -> Path:
        if not key or "/" in key or "\\" in key or ".." in key:
            raise StorageError(f"Invalid {kind.value} key: {key!r}")
        return self._dir(kind) / f"{key}{_LOCAL_LAYOUT[kind][1]}"

    def get(self, kind: BlobKind, key: str) -> bytes:
        path = self._path(kind, key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise BlobNotFoundError(kind.value, key)
        except OSError as e:
            logger.error("Failed to read %s: %s", path, e)
            raise StorageError(f"Failed to read {kind.value} {key}: {e}") from e

    def put(self, kind: BlobKind, key: str, data: bytes) -> None:
        path = self._path(kind, key)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file so readers never see a partial blob
            fd, tmp_name = tempfile.mkstemp(dir=str(path.parent), prefix=".tmp-")
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.error("Failed to write %s: %s", path, e)
            raise StorageError(f"Failed to write {kind.value} {key}: {e}") from e

    def delete(self, kind: BlobKind, key: str) -> None:
        path = self._path(kind, key)
        try:
            path.unlink()
        except FileNotFoundError:
            raise BlobNotFoundError(kind.value, key)
        except OSError as e:
            logger.error("Failed to delete %s: %s", path, e)
            raise StorageError(f"Failed to delete {kind.value} {key}: {e}") from e

    def list(self, kind: BlobKind) -> List[str]:
        directory = self._dir(kind)
        suffix = _LOCAL_LAYOUT[kind][1]
        if not directory.exists():
            return []
        try:
            names = sorted(p.name for p in directory.iterdir() if p.is_file())
        except OSError as e:
            logger.error("Failed to list %s: %s", directory, e)
            raise StorageError(f"Failed to list {kind.value}: {e}") from e
        keys = []
        for name in names:
            if name.startswith(".tmp-"):
                continue
            if suffix:
                if not name.endswith(suffix):
                    continue
                name = name[: -len(suffix)]
            keys.append(name)
        return keys

    def exists(self, kind: BlobKind, key: str) -> bool:
        return self._path(kind, key).is_file()


# -----------------------------------------------------------------------------
# Cloudflare R2 / S3
# -----------------------------------------------------------------------------

_r2_client: Optional[Any] = None


def get_r2_client():
    global _r2_client
    if _r2_client is None:
        session = boto3.session.Session()
        _r2_client = session.client(
            "s3",
            endpoint_url=R2_ENDPOINT_URL or None,
            aws_access_key_id=R2_ACCESS_KEY_ID or None,
            aws_secret_access_key=R2_SECRET_ACCESS_KEY or None,
            # Cloudflare R2 requires signature version 4 (sigv4)
            config=Config(signature_version="s3v4"),
            region_name="auto",
        )
    return _r2_client


_MISSING_CODES = {"NoSuchKey", "404", "NotFound"}

_CONTENT_TYPES = {
    BlobKind.METADATA: "application/json",
    BlobKind.COMMENTS: "application/json",
    BlobKind.VIDEO: "application/octet-stream",
    BlobKind.THUMBNAIL: "image/jpeg",
}


def _is_missing(exc: ClientError) -> bool:
    return str(exc.response.get("Error", {}).get("Code", "")) in _MISSING_CODES


class R2BlobStore(BlobStore):
    """Stores blobs as objects under <prefix>/<kind>/<key> in one bucket."""

    def __init__(
        self,
        bucket: str = R2_BUCKET_NAME,
        prefix: str = R2_PREFIX,
        client: Optional[Any] = None,
    ):
        if not bucket:
            raise StorageError("R2 bucket name is not configured")
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_r2_client()
        return self._client

    def _kind_prefix(self, kind: BlobKind) -> str:
        if self.prefix:
            return f"{self.prefix}/{kind.value}/"
        return f"{kind.value}/"

    def _object_key(self, kind: BlobKind, key: str) -> str:
        if not key or "/" in key:
            raise StorageError(f"Invalid {kind.value} key: {key!r}")
        return self._kind_prefix(kind) + key

    def get(self, kind: BlobKind, key: str) -> bytes:
        object_key = self._object_key(kind, key)
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=object_key)
            return obj["Body"].read()
        except ClientError as exc:
            if _is_missing(exc):
                raise BlobNotFoundError(kind.value, key)
            logger.error("Failed to get object %s: %s", object_key, exc)
            raise StorageError(f"Failed to get {kind.value} {key}: {exc}") from exc
        except BotoCoreError as exc:
            logger.error("Failed to get object %s: %s", object_key, exc)
            raise StorageError(f"Failed to get {kind.value} {key}: {exc}") from exc

    def put(self, kind: BlobKind, key: str, data: bytes) -> None:
        object_key = self._object_key(kind, key)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=data,
                ContentType=_CONTENT_TYPES[kind],
            )
        except (ClientError, BotoCoreError) as exc:
            logger.error("Failed to put object %s: %s", object_key, exc)
            raise StorageError(f"Failed to put {kind.value} {key}: {exc}") from exc

    def delete(self, kind: BlobKind, key: str) -> None:
        # S3 deletes are silent for missing keys, so probe first
        if not self.exists(kind, key):
            raise BlobNotFoundError(kind.value, key)
        object_key = self._object_key(kind, key)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=object_key)
        except (ClientError, BotoCoreError) as exc:
            logger.error("Failed to delete object %s: %s", object_key, exc)
            raise StorageError(f"Failed to delete {kind.value} {key}: {exc}") from exc

    def list(self, kind: BlobKind) -> List[str]:
        prefix = self._kind_prefix(kind)
        keys: List[str] = []
        try:
            paginator = self.client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                for obj in page.get("Contents", []):
                    keys.append(obj["Key"][len(prefix):])
        except (ClientError, BotoCoreError) as exc:
            logger.error("Failed to list objects under %s: %s", prefix, exc)
            raise StorageError(f"Failed to list {kind.value}: {exc}") from exc
        return keys

    def exists(self, kind: BlobKind, key: str) -> bool:
        object_key = self._object_key(kind, key)
        try:
            self.client.head_object(Bucket=self.bucket, Key=object_key)
            return True
        except ClientError as exc:
            if _is_missing(exc):
                return False
            logger.error("Failed to head object %s: %s", object_key, exc)
            raise StorageError(f"Failed to check {kind.value} {key}: {exc}") from exc
        except BotoCoreError as exc:
            logger.error("Failed to head object %s: %s", object_key, exc)
            raise StorageError(f"Failed to check {kind.value} {key}: {exc}") from exc


# -----------------------------------------------------------------------------
# In-memory
# -----------------------------------------------------------------------------

class MemoryBlobStore(BlobStore):
    """Thread-safe dict-backed store."""

    def __init__(self):
        self._blobs: Dict[Tuple[BlobKind, str], bytes] = {}
        self._lock = Lock()

    def get(self, kind: BlobKind, key: str) -> bytes:
        with self._lock:
            try:
                return self._blobs[(kind, key)]
            except KeyError:
                raise BlobNotFoundError(kind.value, key)

    def put(self, kind: BlobKind, key: str, data: bytes) -> None:
        with self._lock:
            self._blobs[(kind, key)] = bytes(data)

    def delete(self, kind: BlobKind, key: str) -> None:
        with self._lock:
            try:
                del self._blobs[(kind, key)]
            except KeyError:
                raise BlobNotFoundError(kind.value, key)

    def list(self, kind: BlobKind) -> List[str]:
        with self._lock:
            return sorted(key for blob_kind, key in self._blobs if blob_kind == kind)

    def exists(self, kind: BlobKind, key: str) -> bool:
        with self._lock:
            return (kind, key) in self._blobs
