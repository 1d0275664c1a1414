# venefoods/repositories/coupon_repo.py
import uuid

from sqlmodel import Session, select

from venefoods.models.coupon import Coupon


class CouponRepository:

    def find_active(self, session: Session, code: str) -> Coupon | None:
        """
        Exact match on an already-normalised code, active coupons only.
        First row wins if the table ever holds duplicates.
        """
        stmt = (
            select(Coupon)
            .where(Coupon.code == code, Coupon.active == True)  # noqa: E712
            .order_by(Coupon.created_at)
        )
        return session.exec(stmt).first()

    def get_by_code(self, session: Session, code: str) -> Coupon | None:
        stmt = select(Coupon).where(Coupon.code == code)
        return session.exec(stmt).first()

    def get_by_id(self, session: Session, coupon_id: uuid.UUID) -> Coupon | None:
        return session.get(Coupon, coupon_id)

    def list_all(self, session: Session) -> list[Coupon]:
        stmt = select(Coupon).order_by(Coupon.created_at.desc())
        return session.exec(stmt).all()

    # CRUD
    def create(self, session: Session, coupon: Coupon) -> Coupon:
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        return coupon

    def update(self, session: Session, coupon: Coupon) -> Coupon:
        session.add(coupon)
        session.commit()
        session.refresh(coupon)
        return coupon

    def delete(self, session: Session, coupon: Coupon) -> None:
        session.delete(coupon)
        session.commit()
