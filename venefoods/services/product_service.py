# venefoods/services/product_service.py
import logging
import uuid

from sqlmodel import Session

from venefoods.core.exceptions import NotFound, TransientServiceError
from venefoods.core.storage_utils import (
    delete_public_url,
    generate_filename,
    upload_to_storage,
    validate_image,
)
from venefoods.models.product import Product
from venefoods.repositories.product_repo import ProductRepository
from venefoods.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    """
    Business logic for the product catalog.

    Responsibilities:
      - storefront listing (active products only)
      - admin CRUD (enforced at router via require_admin)
      - image upload/delete orchestration with Supabase Storage
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 100,
        only_active: bool = True,
        category: str | None = None,
    ) -> list[Product]:
        return self.repo.list_products(
            session,
            skip=skip,
            limit=limit,
            only_active=only_active,
            category=category,
        )

    def get_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        only_active: bool = False,
    ) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product or (only_active and not product.is_active):
            raise NotFound("Product not found")
        return product

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        product = Product(**payload.model_dump())
        created = self.repo.create(session, product)
        logger.info("Product %s created (%s)", created.id, created.name)
        return created

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update: only fields present in the payload are written.
        """
        product = self.get_product(session, product_id)
        for field, value in payload.model_dump(exclude_unset=True).items():
            setattr(product, field, value)
        return self.repo.update(session, product)

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Delete a product and clean up its image in Storage.

        Existing orders keep their own copy of name / price.
        """
        product = self.get_product(session, product_id)
        image = product.image
        self.repo.delete(session, product)

        if image:
            try:
                delete_public_url(image)
            except Exception:
                # Orphaned file in the bucket; the row is already gone
                logger.warning("Could not delete image for product %s", product_id)

    # ----- Image -----

    def set_image(
        self,
        session: Session,
        product_id: uuid.UUID,
        content_type: str | None,
        file_bytes: bytes,
    ) -> Product:
        """
        Upload or replace the product image.

        Path pattern:
            products/<product_id>/<uuid>.<ext>
        """
        product = self.get_product(session, product_id)
        ext = validate_image(content_type, file_bytes)

        path = f"products/{product.id}/{generate_filename(ext)}"
        try:
            new_url = upload_to_storage(path, file_bytes, content_type)
        except Exception as exc:
            logger.exception("Image upload failed for product %s", product_id)
            raise TransientServiceError("Error uploading image") from exc

        old_url = product.image
        product.image = new_url
        updated = self.repo.update(session, product)

        if old_url:
            try:
                delete_public_url(old_url)
            except Exception:
                logger.warning("Could not delete previous image for product %s", product_id)

        return updated
