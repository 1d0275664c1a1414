# venefoods/models/order.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order, written once at checkout.

    The primary key is the human-readable sequential id
    (e.g. "VF-250307-0042"). Only `status` and `admin_notes` change
    afterwards, from the back-office.
    """

    __tablename__ = "orders"

    id: str = Field(
        primary_key=True,
        max_length=32,
        description="<PREFIX>-<YYMMDD>-<seq>",
    )

    customer_name: str = Field(max_length=120)
    customer_phone: str = Field(max_length=32)
    customer_tax_id: str | None = Field(
        default=None,
        max_length=32,
        description="CPF / document number (optional)",
    )

    address: str = Field(description="Composed delivery address")

    shipping_zone: str | None = Field(default=None, max_length=80)
    shipping_cost: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)

    # pix | cash | card
    payment_method: str = Field(max_length=16)

    subtotal: Decimal = Field(max_digits=10, decimal_places=2)
    discount: Decimal = Field(default=Decimal("0"), max_digits=10, decimal_places=2)
    coupon_code: str | None = Field(default=None, max_length=40)
    total: Decimal = Field(max_digits=10, decimal_places=2)

    # pending | preparing | completed | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    # online (storefront checkout) | store (counter sale)
    origin: str = Field(default="online", max_length=16, index=True)

    admin_notes: str | None = None

    idempotency_key: str | None = Field(
        default=None,
        max_length=64,
        unique=True,
        index=True,
        description="Client-generated token; resubmits return the same order",
    )

    cart_key: str | None = Field(
        default=None,
        max_length=128,
        index=True,
        description="Storage key of the cart the order was placed from",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Frozen copy of one cart line inside an order.

    product_id is not a foreign key: the catalog entry may be deleted
    later without touching order history.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: str = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: str = Field(max_length=64, index=True)
    name: str
    unit_price: Decimal = Field(max_digits=10, decimal_places=2)
    quantity: int = Field(gt=0, description="Quantity ordered (>=1)")

    # Line order as it was in the cart
    position: int = Field(default=0, ge=0)


class OrderCounter(SQLModel, table=True):
    """
    Singleton row holding the last allocated order sequence number.
    """

    __tablename__ = "order_counters"

    id: str = Field(primary_key=True, max_length=32)
    count: int = Field(default=0, ge=0)
