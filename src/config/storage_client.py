from functools import lru_cache

import boto3
from botocore.client import Config
from .settings import settings


@lru_cache(maxsize=1)
def get_storage_client():
    """Get configured S3-compatible client for product images"""
    return boto3.client(
        "s3",
        endpoint_url=settings.STORAGE_ENDPOINT_URL or None,
        aws_access_key_id=settings.STORAGE_ACCESS_KEY_ID or None,
        aws_secret_access_key=settings.STORAGE_SECRET_ACCESS_KEY or None,
        config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
        region_name="auto",
    )
