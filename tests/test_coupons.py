from decimal import Decimal

import pytest

from venefoods.core.exceptions import InvalidCoupon, ValidationError
from venefoods.repositories.coupon_repo import CouponRepository
from venefoods.schemas.coupon import CouponCreate, CouponUpdate
from venefoods.services.coupon_service import CouponService


@pytest.fixture
def coupon_service():
    return CouponService(CouponRepository())


class TestValidate:
    def test_normalizes_input(self, session, coupon_service, make_coupon):
        make_coupon(code="PROMO10", value="10")

        applied = coupon_service.validate(session, "  promo10 ")

        assert applied.code == "PROMO10"
        assert applied.discount_type == "percent"
        assert applied.value == Decimal("10.00")

    def test_inactive_is_rejected(self, session, coupon_service, make_coupon):
        make_coupon(code="OLD", active=False)

        with pytest.raises(InvalidCoupon):
            coupon_service.validate(session, "old")

    @pytest.mark.parametrize("code", ["", "   ", "NOPE"])
    def test_unknown_or_blank_is_rejected(self, session, coupon_service, code):
        with pytest.raises(InvalidCoupon):
            coupon_service.validate(session, code)


class TestAdmin:
    def test_create_uppercases_code(self, session, coupon_service):
        coupon = coupon_service.create_coupon(
            session, CouponCreate(code="verano", discount_type="fixed", value="15,00")
        )

        assert coupon.code == "VERANO"
        assert coupon.value == Decimal("15.00")

    def test_duplicate_code_rejected(self, session, coupon_service, make_coupon):
        make_coupon(code="VERANO")

        with pytest.raises(ValidationError):
            coupon_service.create_coupon(session, CouponCreate(code="verano", value="5"))

    def test_percent_over_100_rejected_by_schema(self):
        with pytest.raises(ValueError):
            CouponCreate(code="TOO", discount_type="percent", value="150")

    def test_toggle_active(self, session, coupon_service, make_coupon):
        coupon = make_coupon(code="PROMO10")

        updated = coupon_service.update_coupon(session, coupon.id, CouponUpdate(active=False))

        assert updated.active is False
        with pytest.raises(InvalidCoupon):
            coupon_service.validate(session, "PROMO10")

    def test_update_keeps_percent_range(self, session, coupon_service, make_coupon):
        coupon = make_coupon(code="PROMO10", value="10")

        with pytest.raises(ValidationError):
            coupon_service.update_coupon(session, coupon.id, CouponUpdate(value="120"))

        session.refresh(coupon)
        assert coupon.value == Decimal("10.00")
