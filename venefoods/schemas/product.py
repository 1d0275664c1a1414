# venefoods/schemas/product.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, computed_field, field_validator
from sqlmodel import SQLModel, Field

from venefoods.core.money import D, round_money


def coerce_price(v):
    """
    Store rows and back-office forms may carry prices as strings
    ("18,50", "18.50"). Normalise to a 2-place Decimal.
    """
    if v is None:
        return v
    return round_money(D(v))


def coerce_stock(v):
    """Stock as a non-negative int; blank / missing => 0."""
    if v is None:
        return 0
    if isinstance(v, str):
        v = v.strip()
        if not v:
            return 0
    value = int(D(v))
    return max(value, 0)


class ProductBase(SQLModel):
    """
    Shared fields for product read models.
    """

    name: str
    price: Decimal
    stock: int = 0
    category: str
    image: str | None = None
    description: str | None = None
    badge_text: str | None = None
    badge_color: str | None = None
    is_active: bool = True

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v):
        return coerce_price(v)

    @field_validator("stock", mode="before")
    @classmethod
    def normalize_stock(cls, v):
        return coerce_stock(v)


class ProductRead(ProductBase):
    """
    Product representation for the storefront.

    `in_stock` drives the product card: the first "add" is disabled
    when stock <= 0.
    """

    id: uuid.UUID
    created_at: datetime

    @computed_field
    @property
    def in_stock(self) -> bool:
        return self.stock > 0


class ProductCreate(SQLModel):
    """
    Payload for creating a product (admin).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=120)
    price: Decimal = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    category: str = Field(max_length=50)
    image: str | None = None
    description: str | None = None
    badge_text: str | None = Field(default=None, max_length=40)
    badge_color: str | None = Field(default=None, max_length=20)
    is_active: bool = True

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v):
        return coerce_price(v)

    @field_validator("stock", mode="before")
    @classmethod
    def normalize_stock(cls, v):
        return coerce_stock(v)

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=120)
    price: Decimal | None = Field(default=None, ge=0)
    stock: int | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, max_length=50)
    image: str | None = None
    description: str | None = None
    badge_text: str | None = None
    badge_color: str | None = None
    is_active: bool | None = None

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v):
        return coerce_price(v)

    @field_validator("stock", mode="before")
    @classmethod
    def normalize_stock(cls, v):
        if v is None:
            return v
        return coerce_stock(v)

    @field_validator("name", "category")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v
