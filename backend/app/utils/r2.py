"""Cloudflare R2 object store (S3-compatible) for floor-plan images.

Keys follow the upload convention:
    {project_id}/{epoch_ms}.{ext}
so deleting a project removes everything under ``{project_id}/``.
"""

from __future__ import annotations

from typing import Any

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import ClientError

from app.config import settings

logger = structlog.get_logger()


def r2_configured() -> bool:
    """All credentials needed to talk to R2 are present."""
    return bool(
        settings.r2_account_id
        and settings.r2_access_key_id
        and settings.r2_secret_access_key
        and settings.r2_bucket_name
    )


def _build_client() -> Any:
    """Create an S3 client pointed at Cloudflare R2."""
    return boto3.client(
        "s3",
        endpoint_url=f"https://{settings.r2_account_id}.r2.cloudflarestorage.com",
        aws_access_key_id=settings.r2_access_key_id,
        aws_secret_access_key=settings.r2_secret_access_key,
        config=Config(signature_version="s3v4"),
        region_name="auto",
    )


_client: Any = None


def _get_client() -> Any:
    """Lazy-init singleton client."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = _build_client()
    return _client


def reset_client() -> None:
    """Reset the singleton client (for testing)."""
    global _client  # noqa: PLW0603
    _client = None


class R2ObjectStore:
    def __init__(self, bucket: str | None = None) -> None:
        self.bucket = bucket or settings.r2_bucket_name

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        _get_client().put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        logger.info("r2_upload", key=key, size=len(data), content_type=content_type)
        return key

    def url_for(self, key: str) -> str:
        """Pre-signed GET URL, valid for ``presigned_url_expiry_seconds``."""
        try:
            url: str = _get_client().generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=settings.presigned_url_expiry_seconds,
            )
        except ClientError as e:
            logger.error("r2_presign_failed", key=key, error=str(e))
            raise
        return url

    def delete(self, key: str) -> None:
        _get_client().delete_object(Bucket=self.bucket, Key=key)
        logger.info("r2_delete", key=key)

    def delete_prefix(self, prefix: str) -> None:
        client = _get_client()
        paginator = client.get_paginator("list_objects_v2")
        deleted_count = 0
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            objects = page.get("Contents", [])
            if not objects:
                continue
            delete_keys = [{"Key": obj["Key"]} for obj in objects]
            response = client.delete_objects(Bucket=self.bucket, Delete={"Objects": delete_keys})
            errors = response.get("Errors", [])
            if errors:
                logger.warning("r2_delete_partial_failure", prefix=prefix, errors=errors)
            deleted_count += len(delete_keys) - len(errors)
        logger.info("r2_delete_prefix", prefix=prefix, deleted_count=deleted_count)
