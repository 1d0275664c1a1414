# venefoods/models/cart.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class CartSnapshot(SQLModel, table=True):
    """
    Durable copy of one browser's cart.

    The whole line list is serialized as JSON and overwritten on every
    mutation; there is no per-line row.
    """

    __tablename__ = "cart_snapshots"

    key: str = Field(
        primary_key=True,
        max_length=128,
        description="<CART_STORAGE_KEY>:<cart id>",
    )

    lines: str = Field(default="[]", description="JSON list of cart lines")

    coupon: str | None = Field(
        default=None,
        description="JSON of the applied coupon (checkout session state)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
