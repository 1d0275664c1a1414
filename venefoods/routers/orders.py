# venefoods/routers/orders.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from venefoods.core.auth import require_admin
from venefoods.database import get_session
from venefoods.repositories.coupon_repo import CouponRepository
from venefoods.repositories.order_repo import OrderRepository
from venefoods.repositories.product_repo import ProductRepository
from venefoods.repositories.settings_repo import SettingsRepository
from venefoods.routers.cart import get_cart_id
from venefoods.schemas.order import (
    CheckoutQuote,
    CheckoutQuoteRequest,
    CounterSaleCreate,
    OrderCreate,
    OrderRead,
    OrderReceipt,
    OrderStatus,
    OrderStatusUpdate,
    OrderWithItemsRead,
)
from venefoods.services.cart_service import CartService
from venefoods.services.coupon_service import CouponService
from venefoods.services.order_service import OrderService
from venefoods.services.settings_service import SettingsService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
product_repo = ProductRepository()
coupon_service = CouponService(CouponRepository())
cart_service = CartService(product_repo, coupon_service)
settings_service = SettingsService(SettingsRepository())
service = OrderService(
    order_repo,
    product_repo,
    cart_service,
    coupon_service,
    settings_service,
)


# -------- Storefront endpoints --------


@router.post("/quote", response_model=CheckoutQuote)
def quote(
    payload: CheckoutQuoteRequest,
    session: Session = Depends(get_session),
    cart_id: str = Depends(get_cart_id),
):
    """
    Totals for the current cart, applied coupon and selected zone.
    """
    return service.build_quote(session, cart_id, payload.shipping_zone)


@router.post(
    "/checkout",
    response_model=OrderReceipt,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    cart_id: str = Depends(get_cart_id),
):
    """
    Turn the current cart into an order.

    Returns the order plus the WhatsApp link the customer opens to send
    it to the store. The cart is emptied once the order is saved.
    """
    return service.submit_order(session, cart_id, payload)


# -------- Admin endpoints --------


@router.post(
    "/counter-sale",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def record_counter_sale(
    payload: CounterSaleCreate,
    session: Session = Depends(get_session),
):
    """
    Record a sale made at the physical store (admin only).

    The order is saved as completed and the items leave stock at once.
    """
    return service.record_counter_sale(session, payload)


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    status: OrderStatus | None = None,
    skip: int = 0,
    limit: int = 50,
):
    """
    List orders, newest first (admin only).
    """
    return service.list_orders(session, skip, limit, status)


@router.get(
    "/{order_id}",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_admin)],
)
def get_order_admin(
    order_id: str,
    session: Session = Depends(get_session),
):
    """
    Get any order with items (admin only).
    """
    return service.get_order(session, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status and/or notes (admin only).

      pending   -> preparing, completed, cancelled

      preparing -> completed, cancelled

      completed -> (no change)

      cancelled -> (no change)

    Cancelling returns the items to stock.
    """
    return service.update_status(session, order_id, payload)


@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
def delete_order(
    order_id: str,
    session: Session = Depends(get_session),
):
    service.delete_order(session, order_id)
    return None
