# formstore/storage/s3_provider.py
"""
S3 resource store implementation using boto3.

Supports:
- AWS S3
- S3-compatible services (MinIO, DigitalOcean Spaces, etc.)
"""

import logging
import os
from typing import Optional
from urllib.parse import quote

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from formstore.storage.base import ResourceNotFoundError, ResourceRef, ResourceStore

logger = logging.getLogger(__name__)

# Lifetime of presigned download links when no public base URL is configured
PRESIGNED_URL_EXPIRES_SECONDS = 3600


def _is_not_found(error: ClientError) -> bool:
    return error.response.get("Error", {}).get("Code", "") in ("404", "NoSuchKey", "NotFound")


class S3ResourceStore(ResourceStore):
    """
    S3/S3-compatible resource store.

    Configuration via environment:
    - S3_BUCKET: Bucket name (required)
    - S3_ENDPOINT_URL: Custom endpoint for S3-compatible services
    - S3_REGION: AWS region (default: us-east-1)
    - S3_PUBLIC_BASE_URL: Public base URL (CDN/static website); presigned URLs otherwise
    - AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY: AWS credentials
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        region: Optional[str] = None,
        public_base_url: Optional[str] = None,
        client=None,
    ):
        self._bucket = bucket or os.getenv("S3_BUCKET")
        if not self._bucket:
            raise ValueError("S3 bucket required. Set S3_BUCKET env var or pass bucket.")

        self._endpoint_url = endpoint_url or os.getenv("S3_ENDPOINT_URL")
        self._region = region or os.getenv("S3_REGION", "us-east-1")
        base_url = public_base_url or os.getenv("S3_PUBLIC_BASE_URL") or ""
        self._public_base_url = base_url.rstrip("/")

        if client is None:
            config = Config(
                retries={"max_attempts": 3, "mode": "adaptive"},
                connect_timeout=5,
                read_timeout=30,
            )
            client = boto3.client(
                "s3",
                endpoint_url=self._endpoint_url,
                region_name=self._region,
                config=config,
            )
        self._client = client

        logger.info(f"S3 resource store initialized: bucket={self._bucket}")

    @property
    def name(self) -> str:
        return "s3"

    @property
    def bucket(self) -> str:
        return self._bucket

    def upload(
        self,
        key: str,
        content: bytes,
        media_type: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> ResourceRef:
        """Upload a file as-is; browsers download it straight from S3."""
        media_type = media_type or self.guess_media_type(filename)
        extra_args = {"ContentType": media_type}
        if filename:
            extra_args["ContentDisposition"] = f"attachment; filename*=UTF-8''{quote(filename)}"

        try:
            self._client.put_object(Bucket=self._bucket, Key=key, Body=content, **extra_args)
        except ClientError as e:
            logger.error(f"S3 upload failed for {key}: {e}")
            raise

        logger.debug(f"Uploaded to S3: {key} ({len(content)} bytes)")
        return ResourceRef(key=key, filename=filename, media_type=media_type)

    def exists(self, key: str) -> bool:
        """Check if object exists in S3."""
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
            return True
        except ClientError as e:
            if _is_not_found(e):
                return False
            raise

    def delete(self, key: str) -> bool:
        """Delete object from S3. Returns False when the object was already gone."""
        if not self.exists(key):
            logger.debug(f"S3 object already gone: {key}")
            return False
        try:
            self._client.delete_object(Bucket=self._bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return False
            logger.error(f"S3 delete failed for {key}: {e}")
            raise
        logger.debug(f"Deleted from S3: {key}")
        return True

    def public_uri(self, key: str) -> str:
        if not self.exists(key):
            raise ResourceNotFoundError(key)
        if self._public_base_url:
            return f"{self._public_base_url}/{quote(key)}"
        return self._client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self._bucket, "Key": key},
            ExpiresIn=PRESIGNED_URL_EXPIRES_SECONDS,
        )
