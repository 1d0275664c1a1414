# venefoods/models/product.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry for the storefront.

    Columns:
      - id, name, price, stock, category, image, description,
        badge_text, badge_color, is_active, created_at
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=120,
        index=True,
        description="Display name of the product",
    )

    price: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        max_digits=10,
        decimal_places=2,
        description="Unit price (BRL)",
    )

    # Advisory ceiling; 0 means "no stock" for the storefront
    stock: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    category: str = Field(
        default="despensa",
        max_length=50,
        index=True,
    )

    image: str | None = Field(
        default=None,
        description="Public image URL / path",
    )

    description: str | None = None

    # e.g. "MÁS VENDIDO" / "orange"
    badge_text: str | None = Field(default=None, max_length=40)
    badge_color: str | None = Field(default=None, max_length=20)

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
