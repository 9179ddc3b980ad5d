import logging
from dataclasses import dataclass
from functools import lru_cache

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from django.utils.module_loading import import_string

from drive_backend.exceptions import DependencyError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class StorageHandle:
    key: str
    blob_id: str = ""


class StorageBackend:
    """Narrow contract the drive services need from a blob store."""

    def put(self, fileobj, key, content_type="application/octet-stream") -> StorageHandle:
        raise NotImplementedError

    def open(self, handle: StorageHandle):
        """Yield the blob's bytes in chunks."""
        raise NotImplementedError

    def delete(self, handle: StorageHandle) -> None:
        raise NotImplementedError

    def signed_url(self, handle: StorageHandle, ttl: int, filename=None, inline=False) -> str:
        raise NotImplementedError


class S3Storage(StorageBackend):
    def __init__(self, bucket=None, client=None):
        self.bucket = bucket or settings.AWS_S3_BUCKET
        self.client = client or boto3.client(
            "s3",
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
            config=Config(signature_version="s3v4"),
        )

    def put(self, fileobj, key, content_type="application/octet-stream"):
        try:
            response = self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=fileobj,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise DependencyError(f"Upload to storage failed: {exc}") from exc
        return StorageHandle(key=key, blob_id=response.get("VersionId") or response.get("ETag", "").strip('"'))

    def open(self, handle):
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=handle.key)
        except (BotoCoreError, ClientError) as exc:
            raise DependencyError(f"Storage read failed for {handle.key}: {exc}") from exc
        body = response["Body"]
        try:
            for chunk in body.iter_chunks(CHUNK_SIZE):
                yield chunk
        except (BotoCoreError, ClientError) as exc:
            raise DependencyError(f"Storage read failed for {handle.key}: {exc}") from exc
        finally:
            body.close()

    def delete(self, handle):
        try:
            self.client.delete_object(Bucket=self.bucket, Key=handle.key)
        except (BotoCoreError, ClientError) as exc:
            raise DependencyError(f"Storage delete failed for {handle.key}: {exc}") from exc

    def signed_url(self, handle, ttl, filename=None, inline=False):
        params = {"Bucket": self.bucket, "Key": handle.key}
        if filename:
            disposition = "inline" if inline else "attachment"
            params["ResponseContentDisposition"] = f'{disposition}; filename="{filename}"'
        try:
            return self.client.generate_presigned_url("get_object", Params=params, ExpiresIn=ttl)
        except (BotoCoreError, ClientError) as exc:
            raise DependencyError(f"Could not sign URL for {handle.key}: {exc}") from exc


@lru_cache(maxsize=None)
def _storage_for(path):
    return import_string(path)()


def get_storage() -> StorageBackend:
    return _storage_for(settings.DRIVE_STORAGE_BACKEND)


def build_storage_key(owner_id, file_id, filename):
    folder = settings.S3_UPLOAD_FOLDER
    if folder and not folder.endswith("/"):
        folder += "/"
    return f"{folder}{owner_id}/{file_id}/{filename}"
