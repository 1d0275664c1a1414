# venefoods/services/cart_service.py
import uuid
from typing import Callable

from sqlmodel import Session

from venefoods.core.config import get_settings
from venefoods.core.exceptions import NotFound, OutOfStock, StockExceeded
from venefoods.repositories.cart_repo import CartStorage, SqlCartStorage
from venefoods.repositories.product_repo import ProductRepository
from venefoods.schemas.cart import CartLine, CartProduct, CartView, Notice
from venefoods.schemas.coupon import AppliedCoupon
from venefoods.services import cart_engine
from venefoods.services.coupon_service import CouponService

StorageFactory = Callable[[Session, str], CartStorage]


def cart_storage_key(cart_id: str) -> str:
    return f"{get_settings().CART_STORAGE_KEY}:{cart_id}"


def sql_storage(session: Session, cart_id: str) -> CartStorage:
    return SqlCartStorage(session, cart_storage_key(cart_id))


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - load the cart snapshot, run one engine transition, save it back
      - resolve products from the catalog before adding
      - block the first add of a product with no stock (product card rule)
      - attach the user-visible notice for each operation
      - hold the applied coupon for checkout
    """

    def __init__(
        self,
        product_repo: ProductRepository,
        coupon_service: CouponService,
        storage_factory: StorageFactory = sql_storage,
    ):
        self.product_repo = product_repo
        self.coupon_service = coupon_service
        self.storage_factory = storage_factory

    # ---- internal helpers ----

    def _view(
        self,
        lines: list[CartLine],
        coupon: AppliedCoupon | None,
        notice: Notice | None = None,
    ) -> CartView:
        return CartView(
            items=lines,
            total_quantity=cart_engine.total_quantity(lines),
            subtotal=cart_engine.cart_subtotal(lines),
            coupon=coupon,
            notice=notice,
        )

    def _get_cart_product(self, session: Session, product_id: uuid.UUID) -> CartProduct:
        product = self.product_repo.get_by_id(session, product_id)
        if product is None or not product.is_active:
            raise NotFound("Product not found")
        return CartProduct(
            id=product.id,
            name=product.name,
            price=product.price,
            image=product.image,
            stock=product.stock,
        )

    # ---- public operations ----

    def get_cart(self, session: Session, cart_id: str) -> CartView:
        storage = self.storage_factory(session, cart_id)
        return self._view(storage.load(), storage.load_coupon())

    def load_lines(self, session: Session, cart_id: str) -> list[CartLine]:
        return self.storage_factory(session, cart_id).load()

    def add_item(self, session: Session, cart_id: str, product_id: uuid.UUID) -> CartView:
        """
        Add one unit of a catalog product.

        Stock problems are not errors for the caller: the unchanged cart
        comes back with a warning notice.
        """
        product = self._get_cart_product(session, product_id)
        storage = self.storage_factory(session, cart_id)
        lines = storage.load()
        coupon = storage.load_coupon()

        try:
            if cart_engine.find_line(lines, product.id) is None and (product.stock or 0) <= 0:
                raise OutOfStock(product_id=product.id)
            new_lines = cart_engine.add_line(lines, product)
        except StockExceeded as exc:
            return self._view(lines, coupon, Notice(level="warning", message=exc.message))

        storage.save(new_lines)
        return self._view(new_lines, coupon, Notice(message=f"Added {product.name} to cart"))

    def remove_item(self, session: Session, cart_id: str, product_id: str) -> CartView:
        """
        Take one unit away; silently ignores products not in the cart.
        """
        storage = self.storage_factory(session, cart_id)
        lines = storage.load()
        new_lines = cart_engine.remove_line(lines, str(product_id))
        if new_lines is not lines:
            storage.save(new_lines)
        return self._view(new_lines, storage.load_coupon())

    def delete_item(self, session: Session, cart_id: str, product_id: str) -> CartView:
        storage = self.storage_factory(session, cart_id)
        new_lines = cart_engine.delete_line(storage.load(), str(product_id))
        storage.save(new_lines)
        return self._view(
            new_lines,
            storage.load_coupon(),
            Notice(level="success", message="Product removed"),
        )

    def clear_cart(self, session: Session, cart_id: str) -> CartView:
        """
        Empty the cart and drop any applied coupon.
        """
        self.storage_factory(session, cart_id).clear()
        return self._view(cart_engine.clear_lines(), None)

    # ---- coupon (checkout session state) ----

    def apply_coupon(self, session: Session, cart_id: str, code: str) -> CartView:
        """
        Validate and remember a coupon. An invalid code raises
        InvalidCoupon and leaves any previous coupon in place.
        """
        coupon = self.coupon_service.validate(session, code)
        storage = self.storage_factory(session, cart_id)
        storage.save_coupon(coupon)
        return self._view(
            storage.load(),
            coupon,
            Notice(message=f"Coupon {coupon.code} applied"),
        )

    def remove_coupon(self, session: Session, cart_id: str) -> CartView:
        storage = self.storage_factory(session, cart_id)
        storage.save_coupon(None)
        return self._view(storage.load(), None)

    def applied_coupon(self, session: Session, cart_id: str) -> AppliedCoupon | None:
        return self.storage_factory(session, cart_id).load_coupon()
