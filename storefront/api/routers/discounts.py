# storefront/api/routers/discounts.py
from fastapi import APIRouter, Depends, HTTPException

from storefront.api.deps import get_discount_service
from storefront.domain.schemas import DiscountValidateIn, DiscountValidateOut
from storefront.services.discount_service import DiscountService

router = APIRouter(prefix="/api/discount", tags=["discounts"])


@router.post("/validate", response_model=DiscountValidateOut, response_model_exclude_unset=True)
def validate_discount(
    payload: DiscountValidateIn,
    svc: DiscountService = Depends(get_discount_service),
):
    if not payload.code or not payload.code.strip():
        raise HTTPException(status_code=400, detail="Code is required")
    return svc.validate(payload.code)
