# storefront/domain/schemas.py
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# bump when the stored shape of order items / customer details changes
SNAPSHOT_VERSION = 1


# =====================================================
# CHECKOUT (request)
# =====================================================
class CartItemIn(BaseModel):
    """Line item as held by the client cart."""

    id: int | str = Field(..., description="Product id")
    name: str = ""
    price: Decimal = Field(..., gt=0, description="Unit price of the chosen variant")
    quantity: int = Field(..., ge=1)
    size: str | None = None
    color: str | None = None


class CustomerDetailsIn(BaseModel):
    # left optional here so the service can answer with one "missing information" error
    name: str | None = None
    email: str | None = None
    address: str | None = None
    phone: str | None = None
    state: str | None = None


class CheckoutIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[CartItemIn] = Field(default_factory=list)
    customer_details: CustomerDetailsIn | None = Field(default=None, alias="customerDetails")
    discount: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    promo_code: str | None = Field(default=None, alias="promoCode")
    shipping_fee: Decimal | None = Field(default=None, ge=0, alias="shippingFee")


class CheckoutResult(BaseModel):
    authorization_url: str
    reference: str


class CheckoutOut(CheckoutResult):
    success: bool = True


# =====================================================
# ORDER SNAPSHOT (persisted as JSON)
# =====================================================
class OrderItemSnapshot(BaseModel):
    product_id: str
    name: str = ""
    size: str | None = None
    color: str | None = None
    unit_price: Decimal
    quantity: int = Field(..., ge=1)


class CustomerDetailsSnapshot(BaseModel):
    name: str
    email: str
    phone: str
    address: str
    state: str


_ITEM_SCHEMAS = {1: OrderItemSnapshot}
_CUSTOMER_SCHEMAS = {1: CustomerDetailsSnapshot}


def dump_items(items: List[OrderItemSnapshot]) -> List[Dict[str, Any]]:
    return [i.model_dump(mode="json") for i in items]


def load_items(version: int, raw: List[Dict[str, Any]]) -> List[OrderItemSnapshot]:
    schema = _ITEM_SCHEMAS.get(version)
    if schema is None:
        raise ValueError(f"Unknown order snapshot version {version}")
    return [schema.model_validate(i) for i in raw]


def load_customer(version: int, raw: Dict[str, Any]) -> CustomerDetailsSnapshot:
    schema = _CUSTOMER_SCHEMAS.get(version)
    if schema is None:
        raise ValueError(f"Unknown order snapshot version {version}")
    return schema.model_validate(raw)


# =====================================================
# ORDER (response / notification payload)
# =====================================================
class OrderOut(BaseModel):
    id: UUID
    user_id: UUID
    paystack_reference: str
    status: str
    items: List[OrderItemSnapshot]
    customer_details: CustomerDetailsSnapshot
    subtotal: Decimal
    discount_percentage: int
    discount_amount: Decimal
    discount_type: str | None = None
    promo_code: str | None = None
    shipping_fee: Decimal
    total_amount: Decimal
    shipping_carrier: str | None = None
    tracking_number: str | None = None
    estimated_delivery_date: date | None = None
    created_at: datetime
    updated_at: datetime


class ShippingUpdateIn(BaseModel):
    shipping_carrier: str | None = None
    tracking_number: str | None = None
    estimated_delivery_date: date | None = None


# =====================================================
# DISCOUNT CODES
# =====================================================
class DiscountCodeOut(BaseModel):
    id: UUID
    code: str
    discount_percentage: int
    usage_limit: int | None = None
    used_count: int
    active: bool
    expires_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DiscountValidateIn(BaseModel):
    code: str | None = None


class DiscountValidateOut(BaseModel):
    valid: bool
    discount: DiscountCodeOut | None = None


class PromoCreateIn(BaseModel):
    code: str | None = None
    discount_percentage: int | None = None
    usage_limit: int | None = Field(default=None, ge=1)
    expires_at: datetime | None = None


class PromoCreateOut(BaseModel):
    success: bool = True
    promoCode: DiscountCodeOut
