import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from deliveryapp.config import settings

logger = logging.getLogger(__name__)

MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


class BlobStore:
    """S3-compatible bucket holding product images, logos and favicons."""

    def __init__(self, client, bucket: str, public_base: Optional[str] = None):
        self.client = client
        self.bucket = bucket
        self.public_base = public_base

    @classmethod
    def from_settings(cls, config=settings) -> "BlobStore":
        client = boto3.client(
            "s3",
            endpoint_url=config.STORAGE_ENDPOINT_URL,
            aws_access_key_id=config.STORAGE_ACCESS_KEY_ID,
            aws_secret_access_key=config.STORAGE_SECRET_ACCESS_KEY,
            region_name="auto",
        )
        return cls(client, config.STORAGE_BUCKET, config.STORAGE_PUBLIC_BASE or None)

    def exists(self, path: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=path)
            return True
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in MISSING_CODES:
                return False
            raise

    def upload(self, path: str, data: bytes, content_type: Optional[str] = None,
               overwrite: bool = False) -> bool:
        try:
            if not overwrite and self.exists(path):
                logger.warning(f"Blob {path} already exists, not overwriting")
                return False

            extra = {"ContentType": content_type} if content_type else {}
            self.client.put_object(Bucket=self.bucket, Key=path, Body=data, **extra)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Upload of {path} failed: {e}")
            return False

        logger.info(f"Uploaded {path} ({len(data)} bytes)")
        return True

    def get_public_url(self, path: str) -> str:
        if self.public_base:
            return f"{self.public_base.rstrip('/')}/{path}"
        endpoint = self.client.meta.endpoint_url.rstrip("/")
        return f"{endpoint}/{self.bucket}/{path}"

    def delete(self, path: str):
        try:
            self.client.delete_object(Bucket=self.bucket, Key=path)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"Delete of {path} failed: {e}")
