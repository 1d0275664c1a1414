# venefoods/services/cart_engine.py
"""
Cart state transitions.

Every function takes the current line list and returns a new one; the
input list and its lines are never modified, so a failure halfway
through cannot leave a half-updated cart behind. Persistence and
notifications are handled by CartService.
"""

from decimal import Decimal

from venefoods.core.exceptions import StockExceeded
from venefoods.core.money import ZERO, round_money
from venefoods.schemas.cart import CartLine, CartProduct


def find_line(lines: list[CartLine], product_id: str) -> CartLine | None:
    for line in lines:
        if line.product_id == product_id:
            return line
    return None


def add_line(lines: list[CartLine], product: CartProduct) -> list[CartLine]:
    """
    Add one unit of `product`.

    - New product => appended with quantity 1.
    - Existing line => quantity + 1, unless the product has a positive
      stock and the line already holds that many (StockExceeded).

    Stock 0 / missing is treated as unlimited here; blocking the first
    add of an out-of-stock product is the storefront's job.
    """
    existing = find_line(lines, product.id)

    if existing is None:
        line = CartLine(
            product_id=product.id,
            name=product.name,
            price=product.price,
            image=product.image,
            quantity=1,
            stock=product.stock,
        )
        return [*lines, line]

    stock = product.stock or 0
    if stock > 0 and existing.quantity >= stock:
        raise StockExceeded(product_id=product.id, stock=stock)

    return [
        line.model_copy(update={"quantity": line.quantity + 1})
        if line.product_id == product.id
        else line
        for line in lines
    ]


def remove_line(lines: list[CartLine], product_id: str) -> list[CartLine]:
    """
    Take one unit away. A line at quantity 1 disappears.
    Unknown products are a no-op: the same list object is returned.
    """
    existing = find_line(lines, product_id)
    if existing is None:
        return lines

    if existing.quantity <= 1:
        return [line for line in lines if line.product_id != product_id]

    return [
        line.model_copy(update={"quantity": line.quantity - 1})
        if line.product_id == product_id
        else line
        for line in lines
    ]


def delete_line(lines: list[CartLine], product_id: str) -> list[CartLine]:
    """Drop the whole line regardless of quantity."""
    return [line for line in lines if line.product_id != product_id]


def clear_lines() -> list[CartLine]:
    return []


def cart_subtotal(lines: list[CartLine]) -> Decimal:
    return round_money(sum((line.price * line.quantity for line in lines), ZERO))


def total_quantity(lines: list[CartLine]) -> int:
    return sum(line.quantity for line in lines)
