# venefoods/models/coupon.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Coupon(SQLModel, table=True):
    """
    Discount code managed from the back-office.

    `code` is stored trimmed and upper-cased; lookups normalise the
    customer input the same way.
    """

    __tablename__ = "coupons"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    code: str = Field(
        max_length=40,
        unique=True,
        index=True,
    )

    # percent | fixed
    discount_type: str = Field(default="percent", max_length=16)

    value: Decimal = Field(
        max_digits=10,
        decimal_places=2,
        description="Percentage (0-100) or fixed BRL amount",
    )

    active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
