# venefoods/schemas/order.py
import re
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

PaymentMethod = Literal["pix", "cash", "card"]
OrderStatus = Literal["pending", "preparing", "completed", "cancelled"]
OrderOrigin = Literal["online", "store"]

PHONE_MASK = re.compile(r"\(\d{2}\) \d{4,5}-\d{4}")


def format_phone(raw: str) -> str:
    """
    Apply the storefront phone mask.

      "54993294396" -> "(54) 99329-4396"   (mobile, 15 chars)
      "5433294396"  -> "(54) 3329-4396"    (landline, 14 chars)

    A leading 55 country code is dropped. Input that does not fit either
    mask returns "", which fails the phone check.
    """
    digits = re.sub(r"\D", "", raw or "")
    if len(digits) in (12, 13) and digits.startswith("55"):
        digits = digits[2:]
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return ""


def is_masked_phone(phone: str) -> bool:
    return PHONE_MASK.fullmatch(phone) is not None


class CheckoutQuoteRequest(SQLModel):
    model_config = ConfigDict(extra="forbid")

    shipping_zone: str | None = None


class CheckoutQuote(SQLModel):
    """
    Derived checkout totals for the current cart + coupon + zone.
    """

    subtotal: Decimal
    discount: Decimal
    coupon_code: str | None = None
    shipping_zone: str | None = None
    shipping_cost: Decimal
    free_shipping: bool
    # True while zones exist, free shipping does not apply and no valid zone is picked
    zone_required: bool = False
    total: Decimal


class OrderCreate(SQLModel):
    """
    Payload for submitting the current cart as an order.

    User provides:
      - customer name / phone / optional tax id (CPF)
      - address parts (composed into one string on the order)
      - shipping zone (required unless free shipping applies)
      - payment method
      - optional idempotency key (client-generated, one per checkout)

    Backend derives:
      - order id from the shared counter
      - status = 'pending'
      - subtotal / discount / shipping / total from cart + coupon + settings
      - items from cart
    """

    model_config = ConfigDict(extra="forbid")

    customer_name: str = Field(max_length=120)
    customer_phone: str = Field(max_length=32)
    customer_tax_id: str | None = Field(default=None, max_length=32)

    street: str = Field(max_length=200)
    number: str = Field(max_length=20)
    neighborhood: str = Field(max_length=120)
    complement: str | None = Field(default=None, max_length=120)
    reference: str | None = Field(default=None, max_length=200)

    shipping_zone: str | None = None
    payment_method: PaymentMethod = "pix"

    idempotency_key: str | None = Field(default=None, max_length=64)

    @field_validator("customer_name", "street", "number", "neighborhood", "customer_phone")
    @classmethod
    def strip_required(cls, v: str) -> str:
        return v.strip()

    @field_validator(
        "customer_tax_id",
        "complement",
        "reference",
        "shipping_zone",
        "idempotency_key",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = str(v).strip()
        return v or None

    def composed_address(self) -> str:
        """
        "Rua X, 123 - Centro (apto 2) | Ref: near the bakery"
        """
        address = f"{self.street}, {self.number} - {self.neighborhood}"
        if self.complement:
            address += f" ({self.complement})"
        if self.reference:
            address += f" | Ref: {self.reference}"
        return address


class OrderItemRead(SQLModel):
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: str
    customer_name: str
    customer_phone: str
    customer_tax_id: str | None
    address: str
    shipping_zone: str | None
    shipping_cost: Decimal
    payment_method: PaymentMethod
    subtotal: Decimal
    discount: Decimal
    coupon_code: str | None
    total: Decimal
    status: OrderStatus
    origin: OrderOrigin = "online"
    admin_notes: str | None = None
    created_at: datetime


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.
    """

    items: list[OrderItemRead]


class OrderReceipt(SQLModel):
    """
    Checkout response: the committed order plus the WhatsApp handoff.
    """

    order: OrderWithItemsRead
    message: str
    whatsapp_message: str
    whatsapp_url: str


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status / notes.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus | None = None
    admin_notes: str | None = None


class CounterSaleLine(SQLModel):
    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    quantity: int = Field(ge=1)


class CounterSaleCreate(SQLModel):
    """
    Admin payload for a sale made at the physical store.

    The order is recorded as completed right away, with no customer data
    and no shipping.
    """

    model_config = ConfigDict(extra="forbid")

    items: list[CounterSaleLine] = Field(min_length=1)
    payment_method: PaymentMethod = "cash"
