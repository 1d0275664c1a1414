# venefoods/repositories/cart_repo.py
import logging
from datetime import datetime, timezone
from typing import Protocol

from pydantic import TypeAdapter, ValidationError
from sqlmodel import Session

from venefoods.models.cart import CartSnapshot
from venefoods.schemas.cart import CartLine
from venefoods.schemas.coupon import AppliedCoupon

logger = logging.getLogger(__name__)

_lines_adapter = TypeAdapter(list[CartLine])


class CartStorage(Protocol):
    """
    Durable storage for one cart.

    Every mutation overwrites the full snapshot; loading a missing or
    unreadable snapshot yields an empty cart.
    """

    def load(self) -> list[CartLine]: ...

    def save(self, lines: list[CartLine]) -> None: ...

    def load_coupon(self) -> AppliedCoupon | None: ...

    def save_coupon(self, coupon: AppliedCoupon | None) -> None: ...

    def clear(self) -> None: ...


class SqlCartStorage:
    """
    CartStorage backed by one `cart_snapshots` row.
    """

    def __init__(self, session: Session, key: str):
        self.session = session
        self.key = key

    def _row(self) -> CartSnapshot | None:
        return self.session.get(CartSnapshot, self.key)

    def _write(self, row: CartSnapshot) -> None:
        row.updated_at = datetime.now(timezone.utc)
        self.session.add(row)
        self.session.commit()

    def load(self) -> list[CartLine]:
        row = self._row()
        if row is None or not row.lines:
            return []
        try:
            return _lines_adapter.validate_json(row.lines)
        except ValidationError:
            logger.warning("Discarding unreadable cart snapshot %s", self.key)
            return []

    def save(self, lines: list[CartLine]) -> None:
        row = self._row() or CartSnapshot(key=self.key)
        row.lines = _lines_adapter.dump_json(lines).decode()
        self._write(row)

    def load_coupon(self) -> AppliedCoupon | None:
        row = self._row()
        if row is None or not row.coupon:
            return None
        try:
            return AppliedCoupon.model_validate_json(row.coupon)
        except ValidationError:
            logger.warning("Discarding unreadable coupon on cart %s", self.key)
            return None

    def save_coupon(self, coupon: AppliedCoupon | None) -> None:
        row = self._row() or CartSnapshot(key=self.key)
        row.coupon = coupon.model_dump_json() if coupon is not None else None
        self._write(row)

    def clear(self) -> None:
        row = self._row()
        if row is None:
            return
        row.lines = "[]"
        row.coupon = None
        self._write(row)
