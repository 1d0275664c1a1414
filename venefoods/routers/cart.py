# venefoods/routers/cart.py
from fastapi import APIRouter, Depends, Header
from sqlmodel import Session

from venefoods.database import get_session
from venefoods.repositories.coupon_repo import CouponRepository
from venefoods.repositories.product_repo import ProductRepository
from venefoods.schemas.cart import CartItemAdd, CartView, CouponApply
from venefoods.services.cart_service import CartService
from venefoods.services.coupon_service import CouponService

router = APIRouter(prefix="/cart", tags=["Cart"])

product_repo = ProductRepository()
coupon_service = CouponService(CouponRepository())
service = CartService(product_repo, coupon_service)


def get_cart_id(
    cart_id: str = Header(alias="X-Cart-Id", min_length=8, max_length=64),
) -> str:
    """
    Client-generated id of the browser's cart (one per device).
    """
    return cart_id.strip()


@router.get("", response_model=CartView)
def get_cart(
    session: Session = Depends(get_session),
    cart_id: str = Depends(get_cart_id),
):
    """
    Current cart: lines, totals and applied coupon.
    """
    return service.get_cart(session, cart_id)


@router.post("/items", response_model=CartView)
def add_to_cart(
    payload: CartItemAdd,
    session: Session = Depends(get_session),
    cart_id: str = Depends(get_cart_id),
):
    """
    Add one unit of a product.

    Reaching the stock limit does not fail the request: the cart comes
    back unchanged with a warning `notice`.
    """
    return service.add_item(session, cart_id, payload.product_id)


@router.post("/items/{product_id}/decrement", response_model=CartView)
def decrement_cart_item(
    product_id: str,
    session: Session = Depends(get_session),
    cart_id: str = Depends(get_cart_id),
):
    """
    Take one unit away; the line disappears at zero.
    """
    return service.remove_item(session, cart_id, product_id)


@router.delete("/items/{product_id}", response_model=CartView)
def delete_cart_item(
    product_id: str,
    session: Session = Depends(get_session),
    cart_id: str = Depends(get_cart_id),
):
    """
    Remove a product from the cart regardless of quantity.
    """
    return service.delete_item(session, cart_id, product_id)


@router.delete("", response_model=CartView)
def clear_cart(
    session: Session = Depends(get_session),
    cart_id: str = Depends(get_cart_id),
):
    """
    Remove all items (and the applied coupon).
    """
    return service.clear_cart(session, cart_id)


# -------- Coupon --------


@router.post("/coupon", response_model=CartView)
def apply_coupon(
    payload: CouponApply,
    session: Session = Depends(get_session),
    cart_id: str = Depends(get_cart_id),
):
    """
    Apply a coupon code. Unknown or inactive codes answer 400.
    """
    return service.apply_coupon(session, cart_id, payload.code)


@router.delete("/coupon", response_model=CartView)
def remove_coupon(
    session: Session = Depends(get_session),
    cart_id: str = Depends(get_cart_id),
):
    return service.remove_coupon(session, cart_id)
