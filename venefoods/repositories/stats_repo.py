# venefoods/repositories/stats_repo.py
from decimal import Decimal

from sqlalchemy import func
from sqlmodel import Session, select

from venefoods.models.order import Order, OrderItem
from venefoods.models.product import Product


class StatsRepository:
    """
    Read-only aggregated queries for admin dashboard.
    """

    def count_orders(self, session: Session) -> int:
        """
        Number of non-cancelled orders.
        """
        stmt = (
            select(func.count())
            .select_from(Order)
            .where(Order.status != "cancelled")
        )
        value = session.exec(stmt).one()
        return int(value or 0)

    def total_revenue(self, session: Session) -> Decimal:
        """
        Sum of `total` for all non-cancelled orders.
        """
        stmt = (
            select(func.coalesce(func.sum(Order.total), 0))
            .where(Order.status != "cancelled")
        )
        value = session.exec(stmt).one()
        return Decimal(str(value or 0))

    def top_products(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[tuple]:
        """
        Top products by quantity sold across all non-cancelled orders.
        """
        qty_sum = func.coalesce(func.sum(OrderItem.quantity), 0)
        revenue_sum = func.coalesce(
            func.sum(OrderItem.quantity * OrderItem.unit_price),
            0,
        )

        stmt = (
            select(
                OrderItem.product_id,
                func.max(OrderItem.name),
                qty_sum.label("total_quantity"),
                revenue_sum.label("total_revenue"),
            )
            .join(Order, Order.id == OrderItem.order_id)
            .where(Order.status != "cancelled")
            .group_by(OrderItem.product_id)
            .order_by(qty_sum.desc())
            .limit(limit)
        )

        return list(session.exec(stmt).all())

    def customer_totals(self, session: Session) -> list[tuple]:
        """
        (phone, last name used, order count, amount spent) per phone,
        non-cancelled online orders only.
        """
        stmt = (
            select(
                Order.customer_phone,
                func.max(Order.customer_name),
                func.count(Order.id),
                func.coalesce(func.sum(Order.total), 0),
            )
            .where(Order.status != "cancelled", Order.origin == "online")
            .group_by(Order.customer_phone)
            .order_by(func.sum(Order.total).desc())
        )
        return list(session.exec(stmt).all())

    def latest_orders(
        self,
        session: Session,
        limit: int = 5,
    ) -> list[Order]:
        """
        Latest N orders by created_at (any status).
        """
        stmt = (
            select(Order)
            .order_by(Order.created_at.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def low_stock_products(self, session: Session, threshold: int) -> list[Product]:
        """
        Products with fewer than `threshold` units, lowest stock first.
        """
        stmt = (
            select(Product)
            .where(Product.stock < threshold)
            .order_by(Product.stock, Product.name)
        )
        return list(session.exec(stmt).all())
