"""Admin catalog router: product management and product images."""

import uuid

from fastapi import (
    APIRouter,
    Depends,
    File,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from libs.auth.dependencies import require_admin
from libs.auth.models import AdminIdentity
from libs.common.config import get_settings
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.storefront_service.schemas import (
    ImageUploadResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from services.storefront_service.services.catalog import (
    PRODUCT_CATEGORIES,
    create_product,
    delete_product,
    load_products,
    update_product,
)
from services.storefront_service.storage import (
    StorageError,
    StorageService,
    get_storage_service,
    validate_image,
)
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

router = APIRouter(tags=["admin-store"])

UPLOAD_FAILED = "Erreur lors de l'upload de l'image"


# ============================================================================
# IMAGES (declared before /products/{product_id})
# ============================================================================


@router.post(
    "/products/images",
    response_model=ImageUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_product_image(
    file: UploadFile = File(...),
    admin: AdminIdentity = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service),
):
    """Upload an image for the product form; returns its path and public URL."""
    # Declared size first; the bounded read covers a missing or understated size.
    validate_image(file.content_type, file.size or 0)
    data = await file.read(get_settings().MAX_IMAGE_BYTES + 1)
    validate_image(file.content_type, len(data))

    try:
        path, url = await storage.upload_image(data, file.filename, file.content_type)
    except StorageError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=UPLOAD_FAILED)
    return ImageUploadResponse(path=path, url=url)


@router.delete("/products/images", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product_image(
    path: str = Query(..., min_length=1),
    admin: AdminIdentity = Depends(require_admin),
    storage: StorageService = Depends(get_storage_service),
):
    """Remove an uploaded image the admin discarded from the form."""
    try:
        await storage.remove(path)
    except StorageError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Erreur lors de la suppression de l'image",
        )
    return None


# ============================================================================
# PRODUCTS
# ============================================================================


@router.get("/products", response_model=list[ProductResponse])
async def list_all_products(
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return [ProductResponse.model_validate(p) for p in await load_products(db)]


@router.get("/products/categories", response_model=list[str])
async def list_product_categories(admin: AdminIdentity = Depends(require_admin)):
    """Categories offered by the product form."""
    return PRODUCT_CATEGORIES


@router.post(
    "/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED
)
async def add_product(
    data: ProductCreate,
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await create_product(db, **data.model_dump())


@router.patch("/products/{product_id}", response_model=ProductResponse)
async def edit_product(
    product_id: uuid.UUID,
    data: ProductUpdate,
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await update_product(db, product_id, data.model_dump(exclude_unset=True))


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_product(
    product_id: uuid.UUID,
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
    storage: StorageService = Depends(get_storage_service),
):
    """Delete a product; its uploaded image is removed afterwards when possible."""
    image_path = await delete_product(db, product_id)
    if image_path:
        try:
            await storage.remove(image_path)
        except StorageError:
            logger.warning(f"Product {product_id} deleted but image {image_path} was kept")
    return None
