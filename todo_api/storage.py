"""Blob storage backends for task attachments.

Both backends expose the same three operations and are picked once, when the
route dependency builds them; nothing downstream checks which one it got.
"""

import logging
import os
import shutil
from functools import lru_cache
from pathlib import Path
from typing import BinaryIO, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from todo_api import config

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a backend cannot store, delete or address an object."""


class BlobStorage:
    name = "blob"

    def put_object(self, key: str, fileobj: BinaryIO, content_type: Optional[str] = None) -> str:
        """Store the bytes of ``fileobj`` under ``key`` and return a durable reference."""
        raise NotImplementedError

    def get_object_url(self, key: str) -> str:
        raise NotImplementedError

    def delete_object(self, key: str) -> None:
        raise NotImplementedError


class LocalStorage(BlobStorage):
    name = "local"

    def __init__(self, root: str, url_prefix: str = ""):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _path_for(self, key: str) -> Path:
        # keys are generated server-side, but never let one escape the root
        if os.path.basename(key) != key or key in ("", ".", ".."):
            raise StorageError(f"invalid object key: {key!r}")
        return self.root / key

    def put_object(self, key, fileobj, content_type=None):
        path = self._path_for(key)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            with open(path, "wb") as dest:
                shutil.copyfileobj(fileobj, dest)
        except OSError as exc:
            raise StorageError(f"could not write {path}: {exc}") from exc
        logger.debug("Stored %s locally at %s", key, path)
        return self.get_object_url(key)

    def get_object_url(self, key):
        if self.url_prefix:
            return f"{self.url_prefix}/{key}"
        return os.path.join(str(self.root), key)

    def delete_object(self, key):
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"could not delete {key}: {exc}") from exc


class S3Storage(BlobStorage):
    name = "s3"

    def __init__(self, client, bucket: str, endpoint_url: Optional[str] = None):
        self.client = client
        self.bucket = bucket
        self.endpoint_url = endpoint_url.rstrip("/") if endpoint_url else None

    def put_object(self, key, fileobj, content_type=None):
        extra_args = {"ContentType": content_type} if content_type else None
        try:
            self.client.upload_fileobj(fileobj, self.bucket, key, ExtraArgs=extra_args)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"could not upload {key} to bucket {self.bucket}: {exc}") from exc
        logger.debug("Stored %s in bucket %s", key, self.bucket)
        return self.get_object_url(key)

    def get_object_url(self, key):
        if self.endpoint_url:
            return f"{self.endpoint_url}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def delete_object(self, key):
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"could not delete {key} from bucket {self.bucket}: {exc}") from exc


@lru_cache
def get_local_storage() -> BlobStorage:
    return LocalStorage(config.UPLOAD_DIR, config.LOCAL_STORAGE_URL_PREFIX)


@lru_cache
def get_s3_storage() -> BlobStorage:
    client = boto3.client(
        "s3",
        region_name=config.S3_REGION,
        endpoint_url=config.S3_ENDPOINT_URL,
    )
    return S3Storage(client, config.S3_BUCKET_NAME, config.S3_ENDPOINT_URL)
