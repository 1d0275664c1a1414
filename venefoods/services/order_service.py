# venefoods/services/order_service.py
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable
from zoneinfo import ZoneInfo

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlmodel import Session

from venefoods.core.config import get_settings
from venefoods.core.exceptions import (
    IdempotencyConflict,
    MissingShippingZone,
    NotFound,
    OutOfStock,
    StockExceeded,
    StoreClosed,
    TransactionConflict,
    TransientServiceError,
    ValidationError,
)
from venefoods.core.money import ZERO, round_money
from venefoods.models.order import Order, OrderItem
from venefoods.repositories.order_repo import OrderRepository, Sequencer, SqlSequencer
from venefoods.repositories.product_repo import ProductRepository
from venefoods.schemas.cart import CartLine
from venefoods.schemas.coupon import AppliedCoupon
from venefoods.schemas.order import (
    CheckoutQuote,
    CounterSaleCreate,
    OrderCreate,
    OrderItemRead,
    OrderReceipt,
    OrderStatusUpdate,
    OrderWithItemsRead,
    format_phone,
    is_masked_phone,
)
from venefoods.schemas.settings import StoreSettings
from venefoods.services.cart_engine import cart_subtotal
from venefoods.services.cart_service import CartService, cart_storage_key
from venefoods.services.coupon_service import CouponService, coupon_discount
from venefoods.services.handoff import build_order_message, whatsapp_url
from venefoods.services.settings_service import SettingsService
from venefoods.services.shipping_service import (
    qualifies_for_free_shipping,
    resolve_shipping_cost,
)

logger = logging.getLogger(__name__)

SequencerFactory = Callable[[Session], Sequencer]

# Admin status machine
ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"preparing", "completed", "cancelled"},
    "preparing": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

# Placeholders on counter sales, which have no customer data
COUNTER_CUSTOMER_NAME = "Cliente Mostrador"
COUNTER_CUSTOMER_PHONE = "N/A"
COUNTER_ADDRESS = "Tienda Física"


def format_order_id(prefix: str, now: datetime, sequence: int) -> str:
    """
    "<prefix>-<YYMMDD>-<sequence:04d>", e.g. VF-250307-0042.

    The date is the submission date; the sequence is the global counter
    and does not restart at day boundaries.
    """
    return f"{prefix}-{now:%y%m%d}-{sequence:04d}"


def order_total(subtotal: Decimal, discount: Decimal, shipping_cost: Decimal) -> Decimal:
    return max(ZERO, round_money(subtotal - discount + shipping_cost))


def sql_sequencer(session: Session) -> Sequencer:
    return SqlSequencer(session, get_settings().ORDER_COUNTER_ID)


class OrderService:
    """
    Business logic for checkout and orders.

    Responsibilities:
      - Derive checkout totals (subtotal, coupon, shipping, total)
      - Validate the checkout form before touching the counter
      - Allocate the order id and persist the order atomically
      - Clear the cart after commit and build the WhatsApp handoff
      - Back-office status changes (cancel restores stock)
      - Counter sales made at the physical store
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        cart_service: CartService,
        coupon_service: CouponService,
        settings_service: SettingsService,
        sequencer_factory: SequencerFactory = sql_sequencer,
        clock: Callable[[], datetime] | None = None,
    ):
        self.order_repo = order_repo
        self.product_repo = product_repo
        self.cart_service = cart_service
        self.coupon_service = coupon_service
        self.settings_service = settings_service
        self.sequencer_factory = sequencer_factory
        self.clock = clock

    def now(self) -> datetime:
        if self.clock is not None:
            return self.clock()
        return datetime.now(ZoneInfo(get_settings().STORE_TIMEZONE))

    # -------- Pricing --------

    def _price(
        self,
        lines: list[CartLine],
        coupon: AppliedCoupon | None,
        store: StoreSettings,
        zone_name: str | None,
    ) -> CheckoutQuote:
        """
        Raises MissingShippingZone when a zone is required but not given.
        """
        subtotal = cart_subtotal(lines)
        discount = coupon_discount(subtotal, coupon)
        shipping_cost, zone = resolve_shipping_cost(
            store.shipping_zones,
            store.shipping_min_value,
            zone_name,
            subtotal,
        )
        return CheckoutQuote(
            subtotal=subtotal,
            discount=discount,
            coupon_code=coupon.code if coupon else None,
            shipping_zone=zone.name if zone else None,
            shipping_cost=shipping_cost,
            free_shipping=qualifies_for_free_shipping(subtotal, store.shipping_min_value),
            total=order_total(subtotal, discount, shipping_cost),
        )

    def build_quote(
        self,
        session: Session,
        cart_id: str,
        zone_name: str | None = None,
    ) -> CheckoutQuote:
        """
        Totals for display. A missing zone is reported through
        `zone_required` instead of an error.
        """
        lines = self.cart_service.load_lines(session, cart_id)
        coupon = self.cart_service.applied_coupon(session, cart_id)
        store = self.settings_service.get_store_settings(session)

        try:
            return self._price(lines, coupon, store, zone_name)
        except MissingShippingZone:
            subtotal = cart_subtotal(lines)
            discount = coupon_discount(subtotal, coupon)
            return CheckoutQuote(
                subtotal=subtotal,
                discount=discount,
                coupon_code=coupon.code if coupon else None,
                shipping_cost=ZERO,
                free_shipping=False,
                zone_required=True,
                total=order_total(subtotal, discount, ZERO),
            )

    # -------- Checkout --------

    def _validate_customer(self, payload: OrderCreate) -> str:
        """
        Local checks that must pass before any write.
        Returns the formatted phone number.
        """
        if not payload.customer_name:
            raise ValidationError("Please enter your name")

        phone = format_phone(payload.customer_phone)
        if len(phone) < get_settings().MIN_PHONE_LENGTH or not is_masked_phone(phone):
            raise ValidationError("Please enter a valid phone number")

        if not (payload.street and payload.number and payload.neighborhood):
            raise ValidationError("Please complete the delivery address")

        return phone

    def submit_order(
        self,
        session: Session,
        cart_id: str,
        payload: OrderCreate,
    ) -> OrderReceipt:
        """
        Convert the current cart into an Order.

        Steps:
          1. Validate customer data.
          2. Return the existing order if this cart already submitted
             the idempotency key. The cart is left as it is.
          3. Store must be open; cart must not be empty.
          4. Re-validate the applied coupon and apply the shipping zone rule.
          5. In one transaction: allocate the sequence number, insert
             order + items, decrement stock.
          6. Clear the cart and build the WhatsApp handoff.
        """
        # 1) Customer data
        phone = self._validate_customer(payload)

        store = self.settings_service.get_store_settings(session)
        cart_key = cart_storage_key(cart_id)

        # 2) Idempotent resubmission
        if payload.idempotency_key:
            existing = self._find_submitted(session, payload.idempotency_key, cart_key)
            if existing is not None:
                logger.info("Resubmission of order %s ignored", existing.id)
                return self._receipt(session, existing, store)

        # 3) Store / cart
        if not store.is_open:
            raise StoreClosed(store.store_closed_message)

        lines = self.cart_service.load_lines(session, cart_id)
        if not lines:
            raise ValidationError("Cart is empty")

        # 4) Coupon may have been switched off since it was applied
        coupon = self.cart_service.applied_coupon(session, cart_id)
        if coupon is not None:
            coupon = self.coupon_service.validate(session, coupon.code)

        quote = self._price(lines, coupon, store, payload.shipping_zone)

        # 5) Atomic allocation + write
        order = self._commit_with_retries(
            session,
            lambda: self._write_order(
                session,
                lines,
                customer_name=payload.customer_name,
                customer_phone=phone,
                customer_tax_id=payload.customer_tax_id,
                address=payload.composed_address(),
                shipping_zone=quote.shipping_zone,
                shipping_cost=quote.shipping_cost,
                payment_method=payload.payment_method,
                subtotal=quote.subtotal,
                discount=quote.discount,
                coupon_code=quote.coupon_code,
                total=quote.total,
                status="pending",
                origin="online",
                idempotency_key=payload.idempotency_key,
                cart_key=cart_key,
            ),
            idempotency_key=payload.idempotency_key,
            cart_key=cart_key,
        )
        logger.info("Order %s committed (total %s)", order.id, order.total)

        # 6) Post-commit
        self.cart_service.clear_cart(session, cart_id)
        return self._receipt(session, order, store)

    def _find_submitted(self, session: Session, idempotency_key: str, cart_key: str) -> Order | None:
        """
        The order already placed with this key from this cart, if any.
        A key recorded against a different cart raises IdempotencyConflict.
        """
        existing = self.order_repo.get_by_idempotency_key(session, idempotency_key)
        if existing is None:
            return None
        if existing.cart_key != cart_key:
            logger.warning("Idempotency key of order %s reused from another cart", existing.id)
            raise IdempotencyConflict()
        return existing

    def record_counter_sale(self, session: Session, payload: CounterSaleCreate) -> OrderWithItemsRead:
        """
        Record a sale made at the physical store.

        Products go through the same stock guard as the cart: one with no
        stock is rejected, as is a quantity above what is left. The order is
        written as completed, with origin "store", through the same counter
        transaction as a checkout, and stock is decremented.
        """
        quantities: dict[uuid.UUID, int] = {}
        for item in payload.items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity

        lines: list[CartLine] = []
        for product_id, quantity in quantities.items():
            product = self.product_repo.get_by_id(session, product_id)
            if product is None:
                raise NotFound("Product not found")
            if product.stock <= 0:
                raise OutOfStock(product_id=str(product.id), message=f"{product.name} is out of stock")
            if quantity > product.stock:
                raise StockExceeded(product_id=str(product.id), stock=product.stock)
            lines.append(
                CartLine(
                    product_id=str(product.id),
                    name=product.name,
                    price=product.price,
                    quantity=quantity,
                    stock=product.stock,
                )
            )

        subtotal = cart_subtotal(lines)
        order = self._commit_with_retries(
            session,
            lambda: self._write_order(
                session,
                lines,
                customer_name=COUNTER_CUSTOMER_NAME,
                customer_phone=COUNTER_CUSTOMER_PHONE,
                address=COUNTER_ADDRESS,
                shipping_cost=ZERO,
                payment_method=payload.payment_method,
                subtotal=subtotal,
                discount=ZERO,
                total=order_total(subtotal, ZERO, ZERO),
                status="completed",
                origin="store",
            ),
        )
        logger.info("Counter sale %s recorded (total %s)", order.id, order.total)
        return self.get_order(session, order.id)

    def _commit_with_retries(
        self,
        session: Session,
        write: Callable[[], Order],
        idempotency_key: str | None = None,
        cart_key: str | None = None,
    ) -> Order:
        attempts = max(1, get_settings().ORDER_SUBMIT_ATTEMPTS)

        for attempt in range(1, attempts + 1):
            try:
                return write()
            except (IntegrityError, OperationalError):
                session.rollback()
                # A parallel request with the same key may have won the race
                if idempotency_key and cart_key:
                    existing = self._find_submitted(session, idempotency_key, cart_key)
                    if existing is not None:
                        return existing
                logger.warning("Order counter conflict (attempt %d/%d)", attempt, attempts)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.exception("Order submission failed")
                raise TransientServiceError() from exc

        logger.error("Order submission gave up after %d conflicting attempts", attempts)
        raise TransientServiceError() from TransactionConflict()

    def _write_order(self, session: Session, lines: list[CartLine], **fields) -> Order:
        """
        Allocate the next id, insert the order and its items and take the
        quantities out of stock, all in one commit.
        """
        now = self.now()
        sequence = self.sequencer_factory(session).allocate_next()
        order_id = format_order_id(get_settings().ORDER_ID_PREFIX, now, sequence)

        order = Order(id=order_id, created_at=now.astimezone(timezone.utc), **fields)
        self.order_repo.create_order(session, order)

        items = [
            OrderItem(
                order_id=order_id,
                product_id=line.product_id,
                name=line.name,
                unit_price=line.price,
                quantity=line.quantity,
                position=position,
            )
            for position, line in enumerate(lines)
        ]
        self.order_repo.create_items(session, items)

        for line in lines:
            self.product_repo.adjust_stock(session, line.product_id, -line.quantity)

        session.commit()
        session.refresh(order)
        return order

    def _receipt(self, session: Session, order: Order, store: StoreSettings) -> OrderReceipt:
        items = self.order_repo.list_items_for_order(session, order.id)
        message = build_order_message(order, items)
        return OrderReceipt(
            order=self._build_order_with_items_dto(order, items),
            message=f"Pedido {order.id} registrado",
            whatsapp_message=message,
            whatsapp_url=whatsapp_url(store.whatsapp_number, message),
        )

    # -------- Admin operations --------

    def list_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Order]:
        return self.order_repo.list_all(session, skip, limit, status)

    def _get_order(self, session: Session, order_id: str) -> Order:
        order = self.order_repo.get_by_id(session, order_id)
        if order is None:
            raise NotFound("Order not found")
        return order

    def get_order(self, session: Session, order_id: str) -> OrderWithItemsRead:
        order = self._get_order(session, order_id)
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_with_items_dto(order, items)

    def update_status(
        self,
        session: Session,
        order_id: str,
        payload: OrderStatusUpdate,
    ) -> OrderWithItemsRead:
        """
        Admin-only status / notes update with simple state machine:

          pending   -> preparing, completed, cancelled
          preparing -> completed, cancelled
          completed -> (no change)
          cancelled -> (no change)

        Cancelling puts the ordered quantities back into stock.
        Any invalid transition raises 400.
        """
        order = self._get_order(session, order_id)
        current = order.status
        new = payload.status

        if new is not None and new != current:
            if new not in ALLOWED_TRANSITIONS.get(current, set()):
                raise ValidationError(f"Invalid status transition: {current} -> {new}")

        try:
            if new is not None and new != current:
                if new == "cancelled":
                    for item in self.order_repo.list_items_for_order(session, order.id):
                        self.product_repo.adjust_stock(session, item.product_id, item.quantity)
                    logger.info("Stock restored for cancelled order %s", order.id)
                order.status = new

            if payload.admin_notes is not None:
                order.admin_notes = payload.admin_notes

            self.order_repo.update_order(session, order)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Status update failed for order %s", order_id)
            raise TransientServiceError("Error updating the order") from exc

        session.refresh(order)
        return self.get_order(session, order.id)

    def delete_order(self, session: Session, order_id: str) -> None:
        order = self._get_order(session, order_id)
        self.order_repo.delete_order(session, order)
        session.commit()

    # -------- Helper DTO builder --------

    def _build_order_with_items_dto(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderWithItemsRead:
        item_dtos = [
            OrderItemRead(
                product_id=it.product_id,
                name=it.name,
                unit_price=it.unit_price,
                quantity=it.quantity,
                line_total=round_money(it.unit_price * it.quantity),
            )
            for it in items
        ]

        return OrderWithItemsRead(
            id=order.id,
            customer_name=order.customer_name,
            customer_phone=order.customer_phone,
            customer_tax_id=order.customer_tax_id,
            address=order.address,
            shipping_zone=order.shipping_zone,
            shipping_cost=order.shipping_cost,
            payment_method=order.payment_method,
            subtotal=order.subtotal,
            discount=order.discount,
            coupon_code=order.coupon_code,
            total=order.total,
            status=order.status,
            origin=order.origin,
            admin_notes=order.admin_notes,
            created_at=order.created_at,
            items=item_dtos,
        )
