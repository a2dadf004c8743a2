"""Presigned URLs for photo objects (S3 or S3-compatible)."""
import logging
from typing import Any, Optional
from urllib.parse import urlsplit
from uuid import uuid4

import boto3
from botocore.config import Config

from adventure_api.domain.adventure.models import SignedGetUrl, SignedPutUrl
from adventure_api.domain.adventure.repositories import StorageSigner

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN = 900
LOCAL_BASE_URL = "https://example-bucket.s3.local"


def build_base_url(
    bucket: Optional[str],
    region: str,
    endpoint: Optional[str] = None,
    public_base_url: Optional[str] = None,
) -> str:
    """Public base URL that objects are served from."""
    if public_base_url:
        return public_base_url.rstrip("/")
    if endpoint:
        return f"{endpoint}/{bucket or ''}".rstrip("/")
    if bucket:
        return f"https://{bucket}.s3.{region}.amazonaws.com"
    return LOCAL_BASE_URL


class S3Signer(StorageSigner):
    """Signs PUT/GET URLs with boto3, or locally when no bucket is configured.

    Local URLs carry a random ``signature`` parameter and are only useful in
    development.
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        region: str = "us-east-1",
        endpoint: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        public_base_url: Optional[str] = None,
        put_acl: Optional[str] = None,
        expires_in: int = DEFAULT_EXPIRES_IN,
        client: Any = None,
    ):
        self.bucket = bucket or None
        self.put_acl = put_acl or None
        self.expires_in = expires_in
        self.base_url = build_base_url(self.bucket, region, endpoint or None, public_base_url or None)

        if client is None and self.bucket:
            client = boto3.client(
                "s3",
                region_name=region,
                endpoint_url=endpoint or None,
                aws_access_key_id=access_key or None,
                aws_secret_access_key=secret_key or None,
                config=Config(s3={"addressing_style": "path" if endpoint else "auto"}),
            )
        self._client = client

    @classmethod
    def from_settings(cls, settings) -> "S3Signer":
        return cls(
            bucket=settings.s3_bucket,
            region=settings.s3_region,
            endpoint=settings.s3_endpoint,
            access_key=settings.s3_access_key,
            secret_key=settings.s3_secret_key,
            public_base_url=settings.s3_public_base_url,
            put_acl=settings.s3_put_object_acl,
            expires_in=settings.s3_url_expires_in,
        )

    @property
    def is_local(self) -> bool:
        return self._client is None or self.bucket is None

    def _local_url(self, key: str) -> str:
        return f"{self.base_url}/{key}?signature={uuid4().hex}&expires={self.expires_in}"

    async def sign_put_url(self, key: str, content_type: Optional[str] = None) -> SignedPutUrl:
        photo_url = f"{self.base_url}/{key}"
        if self.is_local:
            upload_url = self._local_url(key)
        else:
            params = {"Bucket": self.bucket, "Key": key}
            if content_type:
                params["ContentType"] = content_type
            if self.put_acl:
                params["ACL"] = self.put_acl
            upload_url = self._client.generate_presigned_url(
                "put_object", Params=params, ExpiresIn=self.expires_in
            )
        return SignedPutUrl(upload_url=upload_url, photo_url=photo_url, expires_in=self.expires_in, key=key)

    async def sign_get_url(self, key: str) -> SignedGetUrl:
        if self.is_local:
            url = self._local_url(key)
        else:
            url = self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=self.expires_in,
            )
        return SignedGetUrl(url=url, expires_in=self.expires_in, key=key)

    def key_for_url(self, url: str) -> Optional[str]:
        """Object key of a URL under ``base_url``; None for foreign hosts."""
        prefix = f"{self.base_url}/"
        if not url.startswith(prefix):
            return None
        key = urlsplit(url[len(prefix):]).path
        return key or None
