# storefront/services/checkout_service.py
import json
from datetime import date, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import List, NamedTuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from storefront.data.models.order import OrderModel
from storefront.domain.order_status import OrderStatus
from storefront.domain.schemas import (
    SNAPSHOT_VERSION,
    CartItemIn,
    CheckoutResult,
    CustomerDetailsIn,
    CustomerDetailsSnapshot,
    OrderItemSnapshot,
    dump_items,
)
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.discount_service import DiscountService, normalize_code
from storefront.services.paystack_client import PaystackClient
from storefront.utils.errors import ProfileMissing, ValidationError
from storefront.utils.settings import SHIPPING_FEE, DELIVERY_BUSINESS_DAYS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")
REQUIRED_CUSTOMER_FIELDS = ("email", "name", "address", "phone", "state")


class OrderTotals(NamedTuple):
    subtotal: Decimal
    discount_percentage: int
    discount_amount: Decimal
    shipping_fee: Decimal
    total_amount: Decimal


def price_order(items: List[CartItemIn], discount_percentage: int, shipping_fee: Decimal) -> OrderTotals:
    subtotal = sum((Decimal(i.price) * i.quantity for i in items), Decimal("0.00"))
    subtotal = subtotal.quantize(CENT, rounding=ROUND_HALF_UP)
    shipping_fee = Decimal(shipping_fee).quantize(CENT, rounding=ROUND_HALF_UP)

    # every part is rounded before the total so the stored columns add up exactly
    discount_amount = (subtotal * discount_percentage / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)
    discount_amount = min(discount_amount, subtotal)

    return OrderTotals(
        subtotal=subtotal,
        discount_percentage=discount_percentage,
        discount_amount=discount_amount,
        shipping_fee=shipping_fee,
        total_amount=subtotal - discount_amount + shipping_fee,
    )


def to_minor_units(amount: Decimal) -> int:
    """Naira -> kobo."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def estimate_delivery_date(today: date, business_days: int = DELIVERY_BUSINESS_DAYS) -> date:
    day = today
    added = 0
    while added < business_days:
        day += timedelta(days=1)
        if day.weekday() < 5:  # Mon-Fri
            added += 1
    return day


class CheckoutService:
    """
    Use Case: hosted checkout.

    1. Validates the cart and customer details
    2. Confirms the promo code with the discount ledger
    3. Prices the order and opens a Paystack transaction
    4. Stores a pending order under the Paystack reference

    Nothing is written when the gateway call fails.
    """

    def __init__(
        self,
        order_repo: OrderRepo,
        user_repo: UserRepo,
        discount_service: DiscountService,
        gateway: PaystackClient,
        default_shipping_fee: Decimal | int = SHIPPING_FEE,
    ):
        self.order_repo = order_repo
        self.user_repo = user_repo
        self.discount_service = discount_service
        self.gateway = gateway
        self.default_shipping_fee = Decimal(str(default_shipping_fee))

    def checkout(
        self,
        user_id: UUID,
        items: List[CartItemIn],
        customer_details: CustomerDetailsIn | None,
        discount_percent: Decimal = Decimal("0"),
        promo_code: str | None = None,
        shipping_fee: Decimal | None = None,
    ) -> CheckoutResult:
        customer = self._require_customer(items, customer_details)
        discount_percentage, code = self._resolve_discount(discount_percent, promo_code)

        fee = self.default_shipping_fee if shipping_fee is None else Decimal(shipping_fee)
        totals = price_order(items, discount_percentage, fee)
        amount_minor = to_minor_units(totals.total_amount)

        # no open transaction while waiting on the gateway
        self.order_repo.rollback()

        # gateway first: if it fails there is nothing to clean up
        tx = self.gateway.initialize_transaction(
            email=customer.email,
            amount_minor=amount_minor,
            metadata={
                "user_id": str(user_id),
                "customer_name": customer.name,
                "items": json.dumps([{"name": i.name, "quantity": i.quantity} for i in items]),
            },
        )

        profile = self.user_repo.get_profile_for_user(user_id)
        if not profile:
            logger.warning(f"Checkout by user {user_id} without a profile, reference {tx.reference} unused")
            raise ProfileMissing()

        order = OrderModel(
            user_id=profile.id,
            paystack_reference=tx.reference,
            status=OrderStatus.PENDING.value,
            snapshot_version=SNAPSHOT_VERSION,
            items=dump_items([self._snapshot_item(i) for i in items]),
            customer_details=customer.model_dump(mode="json"),
            subtotal=totals.subtotal,
            discount_percentage=totals.discount_percentage,
            discount_amount=totals.discount_amount,
            discount_type="promo_code" if code else None,
            promo_code=code,
            shipping_fee=totals.shipping_fee,
            total_amount=totals.total_amount,
            estimated_delivery_date=estimate_delivery_date(date.today()),
        )

        try:
            self.order_repo.add_order(order)
            if code and not self.discount_service.redeem(code):
                # used up between validation and now
                self.order_repo.rollback()
                raise ValidationError("Invalid or expired promo code")
            self.order_repo.commit()
        except SQLAlchemyError:
            self.order_repo.rollback()
            raise

        logger.info(
            f"Order {order.id} created: reference={tx.reference} total={totals.total_amount} "
            f"({amount_minor} kobo), discount={totals.discount_amount}"
        )

        return tx

    @staticmethod
    def _require_customer(items, customer_details) -> CustomerDetailsSnapshot:
        if not items or customer_details is None:
            raise ValidationError("Missing required payment information.")

        values = {f: (getattr(customer_details, f) or "").strip() for f in REQUIRED_CUSTOMER_FIELDS}
        if not all(values.values()):
            raise ValidationError("Missing required payment information.")

        return CustomerDetailsSnapshot(**values)

    def _resolve_discount(self, discount_percent, promo_code) -> tuple[int, str | None]:
        """Percentage comes from the ledger, never from the client."""
        if not promo_code or not promo_code.strip():
            if discount_percent:
                logger.warning(f"Client sent discount {discount_percent}% without a promo code, ignoring")
            return 0, None

        result = self.discount_service.validate(promo_code)
        if not result.valid:
            raise ValidationError("Invalid or expired promo code")

        percentage = result.discount.discount_percentage
        if discount_percent and Decimal(discount_percent) != percentage:
            logger.warning(
                f"Client discount {discount_percent}% differs from {result.discount.code} ({percentage}%)"
            )
        return percentage, normalize_code(promo_code)

    @staticmethod
    def _snapshot_item(item: CartItemIn) -> OrderItemSnapshot:
        return OrderItemSnapshot(
            product_id=str(item.id),
            name=item.name,
            size=item.size,
            color=item.color,
            unit_price=item.price,
            quantity=item.quantity,
        )
