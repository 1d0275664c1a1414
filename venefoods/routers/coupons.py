# venefoods/routers/coupons.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from venefoods.core.auth import require_admin
from venefoods.database import get_session
from venefoods.repositories.coupon_repo import CouponRepository
from venefoods.schemas.coupon import CouponCreate, CouponRead, CouponUpdate
from venefoods.services.coupon_service import CouponService

router = APIRouter(
    prefix="/admin/coupons",
    tags=["Admin Coupons"],
    dependencies=[Depends(require_admin)],
)

repo = CouponRepository()
service = CouponService(repo)


@router.get("", response_model=list[CouponRead])
def list_coupons(session: Session = Depends(get_session)):
    return service.list_coupons(session)


@router.post("", response_model=CouponRead, status_code=status.HTTP_201_CREATED)
def create_coupon(
    payload: CouponCreate,
    session: Session = Depends(get_session),
):
    """
    Create a coupon. Codes are stored upper-case and must be unique.
    """
    return service.create_coupon(session, payload)


@router.patch("/{coupon_id}", response_model=CouponRead)
def update_coupon(
    coupon_id: uuid.UUID,
    payload: CouponUpdate,
    session: Session = Depends(get_session),
):
    """
    Partial update; used by the dashboard to toggle `active`.
    """
    return service.update_coupon(session, coupon_id, payload)


@router.delete("/{coupon_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_coupon(
    coupon_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    service.delete_coupon(session, coupon_id)
    return None
