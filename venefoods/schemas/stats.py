# venefoods/schemas/stats.py
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict
from sqlmodel import SQLModel

from venefoods.schemas.order import OrderStatus


class TopProduct(SQLModel):
    """
    Aggregated stats for top-selling products.
    """
    model_config = ConfigDict(extra="forbid")

    product_id: str
    name: str
    total_quantity: int
    total_revenue: Decimal


class LatestOrderSummary(SQLModel):
    """
    Lightweight info for last N orders.
    """
    model_config = ConfigDict(extra="forbid")

    id: str
    created_at: datetime
    customer_name: str
    total: Decimal
    status: OrderStatus


class CustomerSummary(SQLModel):
    """
    Customers grouped by phone number across non-cancelled orders.
    """
    model_config = ConfigDict(extra="forbid")

    name: str
    phone: str
    orders_count: int
    total_spent: Decimal
    is_vip: bool


class LowStockProduct(SQLModel):
    model_config = ConfigDict(extra="forbid")

    product_id: str
    name: str
    stock: int


class AdminDashboardStats(SQLModel):
    """
    Full payload for admin dashboard.

    total_orders and total_revenue leave cancelled orders out.
    """
    model_config = ConfigDict(extra="forbid")

    total_orders: int
    total_revenue: Decimal
    top_products: list[TopProduct]
    latest_orders: list[LatestOrderSummary]
    customers: list[CustomerSummary]
    low_stock_products: list[LowStockProduct]
