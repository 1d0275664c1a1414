# venefoods/routers/products.py
import uuid

from fastapi import (
    APIRouter,
    Depends,
    File,
    UploadFile,
    status,
)
from sqlmodel import Session

from venefoods.core.auth import require_admin
from venefoods.database import get_session
from venefoods.repositories.product_repo import ProductRepository
from venefoods.schemas.product import (
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from venefoods.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    category: str | None = None,
    skip: int = 0,
    limit: int = 100,
):
    """
    List active products, optionally filtered by category.

    - Public endpoint.
    """
    return service.list_products(
        session, skip=skip, limit=limit, only_active=True, category=category
    )


@router.get(
    "/admin",
    response_model=list[ProductRead],
    dependencies=[Depends(require_admin)],
)
def list_all_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 100,
):
    """
    List every product including inactive ones (admin only).
    """
    return service.list_products(session, skip=skip, limit=limit, only_active=False)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a single active product by id.

    - Public endpoint.
    """
    return service.get_product(session, product_id, only_active=True)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product (admin only).
    """
    return service.create_product(session, payload)


@router.patch(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing product (admin only).
    """
    return service.update_product(session, product_id, payload)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a product and its image (admin only).
    """
    service.delete_product(session, product_id)
    return None


@router.post(
    "/{product_id}/image",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
    summary="Upload or replace the product image",
)
def upload_image(
    product_id: uuid.UUID,
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
):
    """
    Upload a new image for the product.

    - Accepts JPEG, PNG, WEBP.
    - The previous image is removed from Storage.
    """
    file_bytes = file.file.read()
    return service.set_image(
        session=session,
        product_id=product_id,
        content_type=file.content_type,
        file_bytes=file_bytes,
    )
