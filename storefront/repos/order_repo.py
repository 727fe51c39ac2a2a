# storefront/repos/order_repo.py
from datetime import datetime, timezone
from typing import List
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.domain.order_status import OrderStatus, TERMINAL_STATUSES


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        # flush only, caller commits together with the promo redemption
        self.db.add(order)
        self.db.flush()
        return order

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def get_order(self, order_id: UUID) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_by_reference(self, reference: str) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.paystack_reference == reference)
        ).scalar_one_or_none()

    def list_orders_for_profile(self, profile_id: UUID) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == profile_id)
                .order_by(OrderModel.created_at)
            ).scalars().all()
        )

    def list_all_orders(self) -> List[OrderModel]:
        return list(
            self.db.execute(select(OrderModel).order_by(OrderModel.created_at)).scalars().all()
        )

    def transition_from_pending(self, reference: str, status: str) -> int:
        """
        UPDATE orders SET status = :status WHERE reference = :ref AND status = 'pending'

        Returns rowcount: 1 when this call performed the transition, 0 when the
        order is unknown or already terminal.
        """
        if OrderStatus(status) not in TERMINAL_STATUSES:
            raise ValueError(f"{status} is not a terminal status")

        result = self.db.execute(
            update(OrderModel)
            .where(
                OrderModel.paystack_reference == reference,
                OrderModel.status == OrderStatus.PENDING.value,
            )
            .values(status=status, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        self.db.commit()
        return result.rowcount

    def update_shipping(self, order: OrderModel, new_data: dict) -> OrderModel:
        for field, value in new_data.items():
            setattr(order, field, value)
        order.updated_at = datetime.now(timezone.utc)
        self.db.commit()
        self.db.refresh(order)
        return order
