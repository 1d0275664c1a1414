from decimal import Decimal

from venefoods.models.cart import CartSnapshot
from venefoods.repositories.cart_repo import SqlCartStorage
from venefoods.schemas.cart import CartProduct
from venefoods.schemas.coupon import AppliedCoupon
from venefoods.services import cart_engine
from venefoods.services.cart_service import cart_storage_key

KEY = "venefoods_cart:abc12345"


def sample_lines():
    lines = cart_engine.add_line([], CartProduct(id="a", name="Harina", price="15.00", stock=4))
    lines = cart_engine.add_line(lines, CartProduct(id="a", name="Harina", price="15.00", stock=4))
    lines = cart_engine.add_line(lines, CartProduct(id="b", name="Queso", price="50.00", image="q.png"))
    return lines


class TestSqlCartStorage:
    def test_missing_snapshot_loads_empty(self, session):
        assert SqlCartStorage(session, KEY).load() == []

    def test_round_trip_keeps_lines_and_order(self, session):
        lines = sample_lines()
        SqlCartStorage(session, KEY).save(lines)

        session.expire_all()
        reloaded = SqlCartStorage(session, KEY).load()

        assert [line.model_dump() for line in reloaded] == [line.model_dump() for line in lines]
        assert [line.product_id for line in reloaded] == ["a", "b"]
        assert reloaded[0].quantity == 2
        assert reloaded[1].price == Decimal("50.00")

    def test_corrupt_snapshot_loads_empty(self, session):
        session.add(CartSnapshot(key=KEY, lines="{not json"))
        session.commit()

        assert SqlCartStorage(session, KEY).load() == []

    def test_invalid_line_loads_empty(self, session):
        session.add(CartSnapshot(key=KEY, lines='[{"product_id": "a", "quantity": 0}]'))
        session.commit()

        assert SqlCartStorage(session, KEY).load() == []

    def test_coupon_round_trip(self, session):
        storage = SqlCartStorage(session, KEY)
        coupon = AppliedCoupon(code="DIEZ", discount_type="percent", value=Decimal("10"))

        storage.save_coupon(coupon)
        assert storage.load_coupon().model_dump() == coupon.model_dump()

        storage.save_coupon(None)
        assert storage.load_coupon() is None

    def test_clear_drops_lines_and_coupon(self, session):
        storage = SqlCartStorage(session, KEY)
        storage.save(sample_lines())
        storage.save_coupon(AppliedCoupon(code="X", discount_type="fixed", value=Decimal("5")))

        storage.clear()

        assert storage.load() == []
        assert storage.load_coupon() is None

    def test_carts_are_isolated_by_key(self, session):
        SqlCartStorage(session, KEY).save(sample_lines())

        assert SqlCartStorage(session, "venefoods_cart:other").load() == []


def test_storage_key_uses_configured_prefix():
    assert cart_storage_key("abc12345") == KEY
