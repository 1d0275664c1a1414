# venefoods/routers/admin_stats.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from venefoods.core.auth import require_admin
from venefoods.database import get_session
from venefoods.repositories.stats_repo import StatsRepository
from venefoods.schemas.stats import AdminDashboardStats, CustomerSummary
from venefoods.services.stats_service import StatsService

router = APIRouter(prefix="/admin/stats", tags=["Admin Stats"])

repo = StatsRepository()
service = StatsService(repo)


@router.get(
    "",
    response_model=AdminDashboardStats,
    dependencies=[Depends(require_admin)],
)
def get_admin_dashboard_stats(
    top: int = 5,
    latest: int = 5,
    session: Session = Depends(get_session),
):
    """
    Aggregated statistics for the admin dashboard.

    Query params (optional):
      - top: number of best-selling products
      - latest: number of recent orders
    """
    return service.get_admin_dashboard_stats(
        session=session,
        top_n_products=top,
        latest_n_orders=latest,
    )


@router.get(
    "/customers",
    response_model=list[CustomerSummary],
    dependencies=[Depends(require_admin)],
)
def list_customers(session: Session = Depends(get_session)):
    """
    Customers grouped by phone, biggest spenders first.
    """
    return service.list_customers(session)
