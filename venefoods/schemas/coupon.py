# venefoods/schemas/coupon.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

from venefoods.schemas.product import coerce_price

DiscountType = Literal["percent", "fixed"]


def normalize_code(raw: str) -> str:
    """Customer input and stored codes compare trimmed + upper-cased."""
    return (raw or "").strip().upper()


class AppliedCoupon(SQLModel):
    """
    Discount terms of a validated coupon, held in the checkout session.
    """

    code: str
    discount_type: DiscountType
    value: Decimal


class CouponCreate(SQLModel):
    """
    Payload for creating a coupon (admin).
    """

    model_config = ConfigDict(extra="forbid")

    code: str = Field(min_length=1, max_length=40)
    discount_type: DiscountType = "percent"
    value: Decimal = Field(gt=0)
    active: bool = True

    @field_validator("code")
    @classmethod
    def upper_code(cls, v: str) -> str:
        v = normalize_code(v)
        if not v:
            raise ValueError("code cannot be empty")
        return v

    @field_validator("value", mode="before")
    @classmethod
    def normalize_value(cls, v):
        return coerce_price(v)

    @model_validator(mode="after")
    def percent_in_range(self):
        if self.discount_type == "percent" and self.value > 100:
            raise ValueError("percent coupons cannot exceed 100")
        return self


class CouponUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    discount_type: DiscountType | None = None
    value: Decimal | None = Field(default=None, gt=0)
    active: bool | None = None

    @field_validator("value", mode="before")
    @classmethod
    def normalize_value(cls, v):
        return coerce_price(v)


class CouponRead(SQLModel):
    id: uuid.UUID
    code: str
    discount_type: DiscountType
    value: Decimal
    active: bool
    created_at: datetime
