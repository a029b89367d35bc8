"""Blob storage for journal images."""

import io
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import quote, unquote

import urllib3
from minio import Minio
from minio.error import MinioException

from src.config import get_settings
from src.services.errors import StorageError

logger = logging.getLogger(__name__)

EXTENSIONS_BY_TYPE = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

MAX_EXTENSION_LENGTH = 5


@dataclass(frozen=True)
class ImageUpload:
    """An uploaded image that passed the gateway's type and size checks."""

    filename: str
    content_type: str
    data: bytes

    @property
    def extension(self) -> str:
        """File extension from the original name, falling back to the MIME type."""
        _, dot, ext = self.filename.rpartition(".")
        if dot and ext.isascii() and ext.isalnum() and len(ext) <= MAX_EXTENSION_LENGTH:
            return ext.lower()
        return EXTENSIONS_BY_TYPE.get(self.content_type, "bin")


class BlobStore(ABC):
    """Object store addressed by path, serving each object at a public URL."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Store ``data`` at ``path``, overwriting any existing object. Returns the public URL."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Delete the object at ``path``."""

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/{quote(path, safe='/')}"

    def path_from_url(self, url: str) -> str | None:
        """Map a public URL back to its object path.

        Returns None for URLs that were not issued by this store.
        """
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            return None
        path = unquote(url[len(prefix) :].split("?", 1)[0])
        return path or None


class MinioBlobStore(BlobStore):
    """Blob store backed by an S3-compatible bucket through the MinIO SDK."""

    def __init__(
        self,
        bucket_name: str,
        *,
        endpoint: str,
        access_key: str,
        secret_key: str,
        base_url: str,
        secure: bool = True,
        region: str | None = None,
        timeout: float = 10.0,
        ensure_bucket: bool = True,
    ) -> None:
        super().__init__(base_url)
        # Fail fast: bounded timeouts and no automatic retries
        http_client = urllib3.PoolManager(
            timeout=urllib3.Timeout(connect=timeout, read=timeout),
            retries=False,
        )
        self.client = Minio(
            endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
            http_client=http_client,
        )
        self.bucket_name = bucket_name

        if ensure_bucket:
            self._ensure_bucket()

    def _ensure_bucket(self) -> None:
        """Create the bucket with an anonymous read policy if it does not exist."""
        try:
            if self.client.bucket_exists(self.bucket_name):
                return
            self.client.make_bucket(self.bucket_name)
            self.client.set_bucket_policy(self.bucket_name, json.dumps(self._public_read_policy()))
            logger.info(f"Created public bucket {self.bucket_name}")
        except (MinioException, urllib3.exceptions.HTTPError) as e:
            raise StorageError(f"Could not prepare bucket {self.bucket_name}: {e}") from e

    def _public_read_policy(self) -> dict:
        return {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Effect": "Allow",
                    "Principal": {"AWS": ["*"]},
                    "Action": ["s3:GetObject"],
                    "Resource": [f"arn:aws:s3:::{self.bucket_name}/*"],
                }
            ],
        }

    def upload(self, path: str, data: bytes, content_type: str) -> str:
        try:
            self.client.put_object(
                self.bucket_name,
                path,
                io.BytesIO(data),
                len(data),
                content_type=content_type,
                metadata={"Cache-Control": "max-age=3600"},
            )
        except (MinioException, urllib3.exceptions.HTTPError) as e:
            raise StorageError(f"Upload of {path} failed: {e}") from e

        logger.info(f"Uploaded {len(data)} bytes to {self.bucket_name}/{path}")
        return self.public_url(path)

    def delete(self, path: str) -> None:
        try:
            self.client.remove_object(self.bucket_name, path)
        except (MinioException, urllib3.exceptions.HTTPError) as e:
            raise StorageError(f"Delete of {path} failed: {e}") from e


@lru_cache
def get_blob_store() -> BlobStore:
    """Get the process-wide blob store."""
    settings = get_settings()
    return MinioBlobStore(
        settings.storage_bucket,
        endpoint=settings.storage_endpoint,
        access_key=settings.storage_access_key,
        secret_key=settings.storage_secret_key,
        base_url=settings.storage_base_url,
        secure=settings.storage_secure,
        region=settings.storage_region,
        timeout=settings.storage_timeout_seconds,
    )
