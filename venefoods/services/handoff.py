# venefoods/services/handoff.py
"""
WhatsApp handoff: the order summary the customer sends to the store.
"""

import re
from urllib.parse import quote

from venefoods.core.money import format_brl
from venefoods.models.order import Order, OrderItem

PAYMENT_LABELS = {
    "pix": "PIX",
    "cash": "EFECTIVO",
    "card": "TARJETA",
}


def build_order_message(order: Order, items: list[OrderItem]) -> str:
    lines = [
        f"*NUEVO PEDIDO {order.id} - VENEFOODS*",
        "",
        f"*Cliente:* {order.customer_name}",
        f"*Teléfono:* {order.customer_phone}",
    ]
    if order.customer_tax_id:
        lines.append(f"*CPF:* {order.customer_tax_id}")
    lines.append(f"*Dirección:* {order.address}")
    if order.shipping_zone:
        lines.append(f"*Zona:* {order.shipping_zone}")
    lines.append(f"*Pago:* {PAYMENT_LABELS.get(order.payment_method, order.payment_method.upper())}")

    lines += ["", "*Pedido:*"]
    for item in items:
        lines.append(
            f"▪️ {item.quantity}x {item.name} - {format_brl(item.unit_price * item.quantity)}"
        )

    lines.append("")
    lines.append(f"Subtotal: {format_brl(order.subtotal)}")
    if order.coupon_code:
        lines.append(f"Cupón {order.coupon_code}: -{format_brl(order.discount)}")
    if order.shipping_cost > 0:
        lines.append(f"Envío: {format_brl(order.shipping_cost)}")
    else:
        lines.append("Envío: GRATIS")
    lines.append("")
    lines.append(f"*TOTAL A PAGAR: {format_brl(order.total)}*")

    return "\n".join(lines)


def whatsapp_url(number: str, message: str) -> str:
    digits = re.sub(r"\D", "", number or "")
    return f"https://wa.me/{digits}?text={quote(message, safe='')}"
