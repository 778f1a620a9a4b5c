from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from storefront.media import local_path_for_url, local_url_for, media_root

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    def save(self, key: str, contents: bytes, content_type: str | None) -> str: ...
    def delete_by_url(self, url: str) -> None: ...


@dataclass(frozen=True)
class LocalStorage:
    def save(self, key: str, contents: bytes, content_type: str | None) -> str:
        dest = media_root() / key
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(contents)
        return local_url_for(key)

    def delete_by_url(self, url: str) -> None:
        path = local_path_for_url(url)
        if path is None or not path.exists():
            return
        try:
            path.unlink()
        except OSError:
            logger.warning("Could not delete local image %s", path)


@dataclass(frozen=True)
class S3Storage:
    bucket: str
    region: str | None = None
    endpoint_url: str | None = None
    public_base_url: str | None = None
    acl: str | None = None

    def _client(self):
        return boto3.client("s3", region_name=self.region, endpoint_url=self.endpoint_url)

    def save(self, key: str, contents: bytes, content_type: str | None) -> str:
        extra: dict[str, str] = {}
        if content_type:
            extra["ContentType"] = content_type
        if self.acl:
            extra["ACL"] = self.acl
        self._client().put_object(Bucket=self.bucket, Key=key, Body=contents, **extra)
        return self.url_for(key)

    def delete_by_url(self, url: str) -> None:
        key = self.key_for(url)
        if not key:
            return
        try:
            self._client().delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError):
            logger.warning("Could not delete s3 object bucket=%s key=%s", self.bucket, key)

    def url_for(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def key_for(self, url: str) -> str | None:
        base = self.url_for("")
        if url.startswith(base):
            return url[len(base):] or None
        return None


def build_media_key(*parts: str) -> str:
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


@lru_cache(maxsize=1)
def get_storage_backend() -> StorageBackend:
    backend = os.getenv("STORAGE_BACKEND", "local").strip().lower()
    if backend == "s3":
        bucket = os.getenv("S3_BUCKET")
        if not bucket:
            raise RuntimeError("S3_BUCKET must be set when STORAGE_BACKEND=s3")
        return S3Storage(
            bucket=bucket,
            region=os.getenv("S3_REGION"),
            endpoint_url=os.getenv("S3_ENDPOINT_URL"),
            public_base_url=os.getenv("S3_PUBLIC_BASE_URL"),
            acl=os.getenv("S3_UPLOAD_ACL", "public-read"),
        )
    return LocalStorage()


def is_local_storage() -> bool:
    return isinstance(get_storage_backend(), LocalStorage)
