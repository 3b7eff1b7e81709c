"""Product image storage on Supabase Storage."""

import secrets
from functools import lru_cache
from typing import Optional, Tuple

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.datetime_utils import utc_timestamp_ms
from libs.common.logging import get_logger

from supabase import Client, create_client

logger = get_logger(__name__)

IMAGE_FOLDER = "products"
CACHE_CONTROL_SECONDS = "3600"


class StorageError(Exception):
    """Raised when the blob store rejects or fails a request."""


def validate_image(content_type: Optional[str], size: int) -> None:
    """Reject non-images and files over the configured size before any upload."""
    max_bytes = get_settings().MAX_IMAGE_BYTES
    if not content_type or not content_type.startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Veuillez sélectionner une image",
        )
    if size > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"L'image ne doit pas dépasser {max_bytes // (1024 * 1024)}MB",
        )


def build_image_path(filename: Optional[str]) -> str:
    """Unique object path like ``products/1718000000000-k3j9x2.jpg``."""
    ext = filename.rsplit(".", 1)[-1].lower() if filename and "." in filename else "bin"
    return f"{IMAGE_FOLDER}/{utc_timestamp_ms()}-{secrets.token_hex(4)}.{ext}"


class StorageService:
    """Thin wrapper over a Supabase Storage bucket."""

    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def public_url(self, path: str) -> str:
        return self.client.storage.from_(self.bucket).get_public_url(path)

    async def upload_image(
        self, data: bytes, filename: Optional[str], content_type: str
    ) -> Tuple[str, str]:
        """
        Upload an image that already passed ``validate_image``.
        Returns: (path, public_url)
        """
        path = build_image_path(filename)
        try:
            self.client.storage.from_(self.bucket).upload(
                path=path,
                file=data,
                file_options={
                    "content-type": content_type,
                    "cache-control": CACHE_CONTROL_SECONDS,
                    "upsert": "false",
                },
            )
        except Exception as e:
            logger.exception(f"Upload of {path} to bucket {self.bucket} failed")
            raise StorageError(str(e)) from e

        logger.info(f"Uploaded product image {path} ({len(data)} bytes)")
        return path, self.public_url(path)

    async def remove(self, path: str) -> None:
        try:
            self.client.storage.from_(self.bucket).remove([path])
        except Exception as e:
            logger.exception(f"Removal of {path} from bucket {self.bucket} failed")
            raise StorageError(str(e)) from e

        logger.info(f"Removed product image {path}")


@lru_cache
def get_storage_service() -> StorageService:
    """FastAPI dependency; the Supabase client is created on first use."""
    settings = get_settings()
    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return StorageService(client, settings.SUPABASE_STORAGE_BUCKET)
