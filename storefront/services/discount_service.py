# storefront/services/discount_service.py
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError

from storefront.data.models.discount_code import DiscountCodeModel
from storefront.domain.schemas import DiscountCodeOut, DiscountValidateOut, PromoCreateIn
from storefront.repos.discount_repo import DiscountRepo
from storefront.utils.errors import ValidationError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def _as_utc(value: datetime) -> datetime:
    # sqlite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_usable(discount: DiscountCodeModel, now: datetime) -> bool:
    if not discount.active:
        return False
    if discount.expires_at is not None and _as_utc(discount.expires_at) <= now:
        return False
    if discount.usage_limit is not None and (discount.used_count or 0) >= discount.usage_limit:
        return False
    return True


class DiscountService:
    """
    Promo code ledger.

    validate() never says why a code was refused: unknown, inactive, expired
    and exhausted codes all come back as valid=False.
    """

    def __init__(self, repo: DiscountRepo):
        self.repo = repo

    def validate(self, code: str) -> DiscountValidateOut:
        normalized = normalize_code(code)
        discount = self.repo.get_by_code(normalized)

        if discount is None or not is_usable(discount, datetime.now(timezone.utc)):
            logger.info(f"Discount code {normalized!r} rejected")
            return DiscountValidateOut(valid=False)

        return DiscountValidateOut(valid=True, discount=DiscountCodeOut.model_validate(discount))

    def redeem(self, code: str) -> bool:
        """Count one use. Must run inside the transaction that stores the order."""
        rowcount = self.repo.increment_used_count(normalize_code(code), datetime.now(timezone.utc))
        return rowcount == 1

    def create_code(self, payload: PromoCreateIn) -> DiscountCodeModel:
        if not payload.code or not payload.code.strip() or not payload.discount_percentage:
            raise ValidationError("Code and discount percentage are required")

        if not 1 <= payload.discount_percentage <= 99:
            raise ValidationError("Discount percentage must be between 1 and 99")

        discount = DiscountCodeModel(
            code=normalize_code(payload.code),
            discount_percentage=payload.discount_percentage,
            usage_limit=payload.usage_limit,
            used_count=0,
            active=True,
            expires_at=_as_utc(payload.expires_at).astimezone(timezone.utc) if payload.expires_at else None,
        )

        try:
            created = self.repo.create(discount)
        except IntegrityError:
            self.repo.rollback()
            raise ValidationError(f"Discount code {discount.code} already exists")

        logger.info(f"Discount code {created.code} created ({created.discount_percentage}%)")
        return created
