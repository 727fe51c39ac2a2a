# storefront/services/order_service.py
from typing import List
from uuid import UUID

from storefront.data.models.order import OrderModel
from storefront.domain.schemas import OrderOut, ShippingUpdateIn, load_items, load_customer
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.utils.errors import OrderNotFound
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def order_to_out(order: OrderModel) -> OrderOut:
    """Read model of an order, snapshot parsed with the schema it was written with."""
    return OrderOut(
        id=order.id,
        user_id=order.user_id,
        paystack_reference=order.paystack_reference,
        status=order.status,
        items=load_items(order.snapshot_version, order.items),
        customer_details=load_customer(order.snapshot_version, order.customer_details),
        subtotal=order.subtotal,
        discount_percentage=order.discount_percentage,
        discount_amount=order.discount_amount,
        discount_type=order.discount_type,
        promo_code=order.promo_code,
        shipping_fee=order.shipping_fee,
        total_amount=order.total_amount,
        shipping_carrier=order.shipping_carrier,
        tracking_number=order.tracking_number,
        estimated_delivery_date=order.estimated_delivery_date,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


class OrderService:
    """Order history for customers and the admin back office. Never changes status."""

    def __init__(self, order_repo: OrderRepo, user_repo: UserRepo):
        self.repo = order_repo
        self.user_repo = user_repo

    def list_orders_for_user(self, user_id: UUID) -> List[OrderOut]:
        profile = self.user_repo.get_profile_for_user(user_id)
        if not profile:
            return []
        return [order_to_out(o) for o in self.repo.list_orders_for_profile(profile.id)]

    def list_all_orders(self) -> List[OrderOut]:
        return [order_to_out(o) for o in self.repo.list_all_orders()]

    def update_shipping(self, order_id: UUID, payload: ShippingUpdateIn) -> OrderOut:
        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFound("Order not found")

        changes = payload.model_dump(exclude_unset=True)
        updated = self.repo.update_shipping(order, changes)

        logger.info(f"Shipping details for order {order_id} updated: {sorted(changes)}")
        return order_to_out(updated)
