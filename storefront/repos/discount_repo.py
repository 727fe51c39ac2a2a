# storefront/repos/discount_repo.py
from datetime import datetime

from sqlalchemy import select, update, or_
from sqlalchemy.orm import Session

from storefront.data.models.discount_code import DiscountCodeModel


class DiscountRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str) -> DiscountCodeModel | None:
        return self.db.execute(
            select(DiscountCodeModel).where(DiscountCodeModel.code == code)
        ).scalar_one_or_none()

    def create(self, discount: DiscountCodeModel) -> DiscountCodeModel:
        self.db.add(discount)
        self.db.commit()
        self.db.refresh(discount)
        return discount

    def rollback(self):
        self.db.rollback()

    def increment_used_count(self, code: str, now: datetime) -> int:
        """
        Conditional increment, same predicate as validation.
        Does not commit: runs inside the order-insert transaction.
        """
        result = self.db.execute(
            update(DiscountCodeModel)
            .where(
                DiscountCodeModel.code == code,
                DiscountCodeModel.active.is_(True),
                or_(DiscountCodeModel.expires_at.is_(None), DiscountCodeModel.expires_at > now),
                or_(
                    DiscountCodeModel.usage_limit.is_(None),
                    DiscountCodeModel.used_count < DiscountCodeModel.usage_limit,
                ),
            )
            .values(used_count=DiscountCodeModel.used_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
