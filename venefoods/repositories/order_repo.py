# venefoods/repositories/order_repo.py
from typing import Protocol

from sqlmodel import Session, select

from venefoods.models.order import Order, OrderCounter, OrderItem


class Sequencer(Protocol):
    """
    Source of monotonically increasing order sequence numbers.

    allocate_next() must run inside the same transaction that persists
    the order, so a rollback also gives the number back.
    """

    def allocate_next(self) -> int: ...


class SqlSequencer:
    """
    Sequencer backed by a singleton `order_counters` row.

    The row is read with SELECT ... FOR UPDATE, so a concurrent
    submission blocks until this transaction commits or rolls back.
    When the row does not exist yet, two first submissions may both try
    to insert it; the loser fails with an IntegrityError and retries.
    """

    def __init__(self, session: Session, counter_id: str):
        self.session = session
        self.counter_id = counter_id

    def allocate_next(self) -> int:
        stmt = (
            select(OrderCounter)
            .where(OrderCounter.id == self.counter_id)
            .with_for_update()
        )
        counter = self.session.exec(stmt).first()
        if counter is None:
            counter = OrderCounter(id=self.counter_id, count=0)

        counter.count = (counter.count or 0) + 1
        self.session.add(counter)
        self.session.flush()
        return counter.count


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits in the write helpers; order creation is a multi-step
        transaction and the service is responsible for session.commit().
    """

    # ---- Orders ----

    def list_all(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Order]:
        stmt = select(Order)
        if status:
            stmt = stmt.where(Order.status == status)
        stmt = stmt.order_by(Order.created_at.desc()).offset(skip).limit(limit)
        return session.exec(stmt).all()

    def get_by_id(self, session: Session, order_id: str) -> Order | None:
        return session.get(Order, order_id)

    def get_by_idempotency_key(self, session: Session, key: str) -> Order | None:
        stmt = select(Order).where(Order.idempotency_key == key)
        return session.exec(stmt).first()

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing.
        """
        session.add(order)
        session.flush()
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.flush()
        return order

    def delete_order(self, session: Session, order: Order) -> None:
        for item in self.list_items_for_order(session, order.id):
            session.delete(item)
        session.delete(order)
        session.flush()

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: str,
    ) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.position)
        )
        return session.exec(stmt).all()

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        return items
