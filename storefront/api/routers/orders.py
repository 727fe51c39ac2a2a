# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_current_user, get_order_service
from storefront.data.models.user import UserModel
from storefront.domain.schemas import OrderOut
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.get("", response_model=List[OrderOut])
def list_my_orders(
    user: UserModel = Depends(get_current_user),
    svc: OrderService = Depends(get_order_service),
):
    """Orders of the signed-in customer, oldest first."""
    return svc.list_orders_for_user(user.id)
