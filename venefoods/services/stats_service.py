# venefoods/services/stats_service.py
from decimal import Decimal

from sqlmodel import Session

from venefoods.core.money import round_money
from venefoods.repositories.stats_repo import StatsRepository
from venefoods.schemas.stats import (
    AdminDashboardStats,
    CustomerSummary,
    LatestOrderSummary,
    LowStockProduct,
    TopProduct,
)

VIP_MIN_ORDERS = 3
VIP_MIN_SPENT = Decimal("200.00")

# Products below this many units are flagged on the dashboard
LOW_STOCK_THRESHOLD = 5


def is_vip(orders_count: int, total_spent: Decimal) -> bool:
    return orders_count >= VIP_MIN_ORDERS or total_spent >= VIP_MIN_SPENT


class StatsService:
    """
    Orchestrates aggregated admin dashboard statistics.
    """

    def __init__(self, repo: StatsRepository):
        self.repo = repo

    def list_customers(self, session: Session) -> list[CustomerSummary]:
        customers: list[CustomerSummary] = []
        for phone, name, orders_count, total_spent in self.repo.customer_totals(session):
            spent = round_money(Decimal(str(total_spent or 0)))
            count = int(orders_count or 0)
            customers.append(
                CustomerSummary(
                    name=name,
                    phone=phone,
                    orders_count=count,
                    total_spent=spent,
                    is_vip=is_vip(count, spent),
                )
            )
        return customers

    def get_admin_dashboard_stats(
        self,
        session: Session,
        top_n_products: int = 5,
        latest_n_orders: int = 5,
    ) -> AdminDashboardStats:
        total_orders = self.repo.count_orders(session)
        total_revenue = self.repo.total_revenue(session)

        # Top products
        top_rows = self.repo.top_products(session, limit=top_n_products)
        top_products: list[TopProduct] = []
        for product_id, name, total_quantity, product_revenue in top_rows:
            top_products.append(
                TopProduct(
                    product_id=product_id,
                    name=name,
                    total_quantity=int(total_quantity or 0),
                    total_revenue=round_money(Decimal(str(product_revenue or 0))),
                )
            )

        # Latest orders
        latest_orders = [
            LatestOrderSummary(
                id=o.id,
                created_at=o.created_at,
                customer_name=o.customer_name,
                total=o.total,
                status=o.status,
            )
            for o in self.repo.latest_orders(session, limit=latest_n_orders)
        ]

        return AdminDashboardStats(
            total_orders=total_orders,
            total_revenue=round_money(total_revenue),
            top_products=top_products,
            latest_orders=latest_orders,
            customers=self.list_customers(session),
            low_stock_products=[
                LowStockProduct(product_id=str(p.id), name=p.name, stock=p.stock)
                for p in self.repo.low_stock_products(session, LOW_STOCK_THRESHOLD)
            ],
        )
