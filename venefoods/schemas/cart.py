# venefoods/schemas/cart.py
import uuid
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from venefoods.schemas.coupon import AppliedCoupon
from venefoods.schemas.product import coerce_price, coerce_stock


class CartProduct(SQLModel):
    """
    The product fields the cart engine needs to create or grow a line.
    """

    id: str
    name: str
    price: Decimal
    image: str | None = None
    stock: int | None = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)

    @field_validator("price", mode="before")
    @classmethod
    def normalize_price(cls, v):
        return coerce_price(v)


class CartLine(SQLModel):
    """
    One product entry in the cart.

    Invariants:
      - quantity >= 1 (a line never exists at 0)
      - at most one line per product_id
    """

    product_id: str
    name: str
    price: Decimal = Field(ge=0)
    image: str | None = None
    quantity: int = Field(ge=1)
    stock: int | None = None

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


class CartItemAdd(SQLModel):
    """
    Payload for adding one unit of a product to the cart.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID


class CouponApply(SQLModel):
    model_config = ConfigDict(extra="forbid")

    code: str = Field(min_length=1, max_length=40)


class Notice(SQLModel):
    """
    User-visible toast attached to a cart response.
    """

    level: Literal["success", "warning", "error"] = "success"
    message: str


class CartView(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLine]
    total_quantity: int
    subtotal: Decimal
    coupon: AppliedCoupon | None = None
    notice: Notice | None = None
