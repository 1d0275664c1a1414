# venefoods/repositories/product_repo.py
import uuid

from sqlmodel import Session, select

from venefoods.models.product import Product


class ProductRepository:
    """
    Data access layer for the product catalog.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 100,
        only_active: bool = True,
        category: str | None = None,
    ) -> list[Product]:
        stmt = select(Product)
        if only_active:
            stmt = stmt.where(Product.is_active == True)  # noqa: E712
        if category:
            stmt = stmt.where(Product.category == category)
        stmt = stmt.order_by(Product.name).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()

    # ----- Stock (no commit; called inside order transactions) -----

    def adjust_stock(self, session: Session, product_id: str, delta: int) -> Product | None:
        """
        Add `delta` to a product's stock, floored at 0.

        Unknown / non-UUID ids are ignored (the product may have been
        deleted since it was added to the cart).
        """
        try:
            pid = uuid.UUID(str(product_id))
        except ValueError:
            return None
        product = session.get(Product, pid)
        if product is None:
            return None
        product.stock = max(0, (product.stock or 0) + delta)
        session.add(product)
        return product
