import logging
import urllib.parse
import uuid
from datetime import datetime
from typing import Iterable, List

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from src.commonUtils.errors import StoreError, ValidationError
from src.config.settings import settings
from src.config.storage_client import get_storage_client
from src.models.productModel import ProductImage

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png"}


def public_url_for(object_key: str) -> str:
    encoded_object_key = urllib.parse.quote(object_key, safe="/:")
    base = settings.STORAGE_PUBLIC_URL or f"{settings.STORAGE_ENDPOINT_URL}/{settings.STORAGE_BUCKET}"
    return f"{base.rstrip('/')}/{encoded_object_key}"


def _object_key(file_name: str) -> str:
    safe_name = (file_name or "image").replace("/", "_")
    return f"{settings.STORAGE_FOLDER}/{datetime.utcnow().timestamp()}_{uuid.uuid4().hex[:8]}_{safe_name}"


async def upload_product_images(files: Iterable[UploadFile]) -> List[ProductImage]:
    """Upload images to the object store and return their {public_id, url} references."""
    files = [f for f in files if f is not None and f.filename]
    if not files:
        return []

    if len(files) > settings.MAX_PRODUCT_IMAGES:
        raise ValidationError(f"You can only upload a maximum of {settings.MAX_PRODUCT_IMAGES} images per product.")

    for upload in files:
        if upload.content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(f"Unsupported image type '{upload.content_type}'. Use jpg or png.")

    client = get_storage_client()
    images: List[ProductImage] = []
    for upload in files:
        object_key = _object_key(upload.filename)
        try:
            await run_in_threadpool(
                client.upload_fileobj,
                upload.file,
                settings.STORAGE_BUCKET,
                object_key,
                ExtraArgs={"ContentType": upload.content_type},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload {upload.filename} to object storage: {e}")
            # Don't leave half an upload batch behind
            await delete_product_images(images)
            raise StoreError("Image upload failed") from e

        images.append(ProductImage(public_id=object_key, url=public_url_for(object_key)))
        logger.info(f"Uploaded product image {object_key}")

    return images


async def delete_product_images(images: Iterable[ProductImage]) -> int:
    """Delete images from the object store. Failures are logged, never raised."""
    images = list(images)
    if not images:
        return 0

    client = get_storage_client()
    deleted = 0
    for image in images:
        try:
            await run_in_threadpool(client.delete_object, Bucket=settings.STORAGE_BUCKET, Key=image.public_id)
            deleted += 1
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to delete object {image.public_id} from storage: {e}")
    return deleted
