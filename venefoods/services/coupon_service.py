# venefoods/services/coupon_service.py
import logging
import uuid
from decimal import Decimal

from sqlmodel import Session

from venefoods.core.exceptions import InvalidCoupon, NotFound, ValidationError
from venefoods.core.money import ZERO, round_money
from venefoods.models.coupon import Coupon
from venefoods.repositories.coupon_repo import CouponRepository
from venefoods.schemas.coupon import (
    AppliedCoupon,
    CouponCreate,
    CouponUpdate,
    normalize_code,
)

logger = logging.getLogger(__name__)


def coupon_discount(subtotal: Decimal, coupon: AppliedCoupon | None) -> Decimal:
    """
    Discount amount for `subtotal`.

      percent => subtotal * value / 100
      fixed   => value (may exceed the subtotal; the order total is
                 clamped at 0 instead)
    """
    if coupon is None:
        return ZERO
    if coupon.discount_type == "percent":
        return round_money(subtotal * coupon.value / Decimal(100))
    return round_money(coupon.value)


class CouponService:
    """
    Coupon validation for checkout plus back-office management.
    """

    def __init__(self, repo: CouponRepository):
        self.repo = repo

    def validate(self, session: Session, raw_code: str) -> AppliedCoupon:
        """
        Look up an active coupon for customer input.

        Raises:
            InvalidCoupon: blank code or no active match.
        """
        code = normalize_code(raw_code)
        if not code:
            raise InvalidCoupon()

        coupon = self.repo.find_active(session, code)
        if coupon is None:
            logger.info("Coupon %s rejected", code)
            raise InvalidCoupon()

        return AppliedCoupon(
            code=coupon.code,
            discount_type=coupon.discount_type,
            value=coupon.value,
        )

    # ----- Admin -----

    def list_coupons(self, session: Session) -> list[Coupon]:
        return self.repo.list_all(session)

    def get_coupon(self, session: Session, coupon_id: uuid.UUID) -> Coupon:
        coupon = self.repo.get_by_id(session, coupon_id)
        if coupon is None:
            raise NotFound("Coupon not found")
        return coupon

    def create_coupon(self, session: Session, payload: CouponCreate) -> Coupon:
        if self.repo.get_by_code(session, payload.code) is not None:
            raise ValidationError("Coupon code already exists")

        coupon = Coupon(
            code=payload.code,
            discount_type=payload.discount_type,
            value=payload.value,
            active=payload.active,
        )
        return self.repo.create(session, coupon)

    def update_coupon(
        self,
        session: Session,
        coupon_id: uuid.UUID,
        payload: CouponUpdate,
    ) -> Coupon:
        coupon = self.get_coupon(session, coupon_id)

        discount_type = payload.discount_type or coupon.discount_type
        value = payload.value if payload.value is not None else coupon.value
        if discount_type == "percent" and value > 100:
            raise ValidationError("percent coupons cannot exceed 100")

        coupon.discount_type = discount_type
        coupon.value = value
        if payload.active is not None:
            coupon.active = payload.active

        return self.repo.update(session, coupon)

    def delete_coupon(self, session: Session, coupon_id: uuid.UUID) -> None:
        coupon = self.get_coupon(session, coupon_id)
        self.repo.delete(session, coupon)
