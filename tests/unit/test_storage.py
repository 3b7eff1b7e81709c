"""Unit tests for product image validation and the blob-store wrapper."""

import re
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from services.storefront_service.storage import (
    StorageError,
    StorageService,
    build_image_path,
    validate_image,
)

FIVE_MB = 5 * 1024 * 1024


@pytest.mark.unit
@pytest.mark.parametrize("content_type", ["image/jpeg", "image/png", "image/webp"])
def test_images_up_to_five_megabytes_are_accepted(content_type):
    validate_image(content_type, FIVE_MB)


@pytest.mark.unit
@pytest.mark.parametrize("content_type", [None, "", "application/pdf", "text/plain"])
def test_non_images_are_rejected(content_type):
    with pytest.raises(HTTPException) as exc:
        validate_image(content_type, 1024)
    assert exc.value.status_code == 400
    assert exc.value.detail == "Veuillez sélectionner une image"


@pytest.mark.unit
def test_oversized_images_are_rejected():
    with pytest.raises(HTTPException) as exc:
        validate_image("image/png", FIVE_MB + 1)
    assert exc.value.status_code == 400
    assert "5MB" in exc.value.detail


@pytest.mark.unit
def test_image_paths_are_unique_and_keep_extension():
    first = build_image_path("Canapé Bleu.JPG")
    second = build_image_path("Canapé Bleu.JPG")

    assert re.fullmatch(r"products/\d+-[0-9a-f]{8}\.jpg", first)
    assert first != second


@pytest.mark.unit
def test_image_path_without_extension():
    assert build_image_path(None).endswith(".bin")
    assert build_image_path("photo").endswith(".bin")


def _supabase_client():
    client = MagicMock()
    bucket = client.storage.from_.return_value
    bucket.get_public_url.side_effect = lambda path: f"https://cdn.cabellakc.fr/{path}"
    return client, bucket


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upload_image_returns_path_and_public_url():
    client, bucket = _supabase_client()
    service = StorageService(client, "products")

    path, url = await service.upload_image(b"\x89PNG", "table.png", "image/png")

    client.storage.from_.assert_called_with("products")
    kwargs = bucket.upload.call_args.kwargs
    assert kwargs["path"] == path
    assert kwargs["file"] == b"\x89PNG"
    assert kwargs["file_options"]["content-type"] == "image/png"
    assert kwargs["file_options"]["cache-control"] == "3600"
    assert kwargs["file_options"]["upsert"] == "false"
    assert url == f"https://cdn.cabellakc.fr/{path}"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_upload_failure_raises_storage_error():
    client, bucket = _supabase_client()
    bucket.upload.side_effect = RuntimeError("bucket unavailable")
    service = StorageService(client, "products")

    with pytest.raises(StorageError):
        await service.upload_image(b"data", "table.png", "image/png")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_remove_deletes_single_path():
    client, bucket = _supabase_client()
    service = StorageService(client, "products")

    await service.remove("products/1-abcd.jpg")

    bucket.remove.assert_called_once_with(["products/1-abcd.jpg"])


@pytest.mark.asyncio
@pytest.mark.unit
async def test_remove_failure_raises_storage_error():
    client, bucket = _supabase_client()
    bucket.remove.side_effect = RuntimeError("not found")
    service = StorageService(client, "products")

    with pytest.raises(StorageError):
        await service.remove("products/1-abcd.jpg")
