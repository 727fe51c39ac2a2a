import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, String, Integer, DateTime, Date, Numeric, JSON, Uuid

from storefront.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("profiles.id"), nullable=False, index=True)
    paystack_reference = Column(String, nullable=False, unique=True, index=True)

    # pending, completed, payment_failed, cancelled
    status = Column(String, nullable=False, default="pending")

    # frozen snapshot, see domain.schemas.OrderItemSnapshot / CustomerDetailsSnapshot
    snapshot_version = Column(Integer, nullable=False, default=1)
    items = Column(JSON, nullable=False)
    customer_details = Column(JSON, nullable=False)

    subtotal = Column(Numeric(12, 2), nullable=False)
    discount_percentage = Column(Integer, nullable=False, default=0)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    discount_type = Column(String, nullable=True)
    promo_code = Column(String, nullable=True)
    shipping_fee = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)

    shipping_carrier = Column(String, nullable=True)
    tracking_number = Column(String, nullable=True)
    estimated_delivery_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
