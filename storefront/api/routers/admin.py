# storefront/api/routers/admin.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_discount_service, get_order_service, require_admin
from storefront.domain.schemas import (
    DiscountCodeOut,
    OrderOut,
    PromoCreateIn,
    PromoCreateOut,
    ShippingUpdateIn,
)
from storefront.services.discount_service import DiscountService
from storefront.services.order_service import OrderService
from storefront.utils.errors import OrderNotFound, ValidationError

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/orders", response_model=List[OrderOut])
def list_all_orders(svc: OrderService = Depends(get_order_service)):
    return svc.list_all_orders()


@router.post("/generate-promo", response_model=PromoCreateOut)
def generate_promo(
    payload: PromoCreateIn,
    svc: DiscountService = Depends(get_discount_service),
):
    try:
        created = svc.create_code(payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return PromoCreateOut(promoCode=DiscountCodeOut.model_validate(created))


@router.patch("/orders/{order_id}/shipping", response_model=OrderOut)
def update_shipping(
    order_id: UUID,
    payload: ShippingUpdateIn,
    svc: OrderService = Depends(get_order_service),
):
    """Carrier, tracking number, delivery date. Status is left alone."""
    try:
        return svc.update_shipping(order_id, payload)
    except OrderNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
