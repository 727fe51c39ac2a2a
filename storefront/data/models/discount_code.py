import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, Integer, Boolean, DateTime, Uuid, CheckConstraint

from storefront.data.database import Base


class DiscountCodeModel(Base):
    __tablename__ = "discount_codes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    code = Column(String, nullable=False, unique=True, index=True)  # always uppercase
    discount_percentage = Column(Integer, nullable=False)
    usage_limit = Column(Integer, nullable=True)
    used_count = Column(Integer, nullable=False, default=0)
    active = Column(Boolean, nullable=False, default=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("discount_percentage BETWEEN 1 AND 99", name="ck_discount_percentage_range"),
    )
