# storefront/api/deps.py
import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.data.models.user import UserModel
from storefront.repos.discount_repo import DiscountRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.checkout_service import CheckoutService
from storefront.services.discount_service import DiscountService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.paystack_client import PaystackClient
from storefront.services.webhook_service import WebhookService
from storefront.utils.security import decode_access_token
from storefront.utils.settings import PAYSTACK_SECRET_KEY
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

bearer = HTTPBearer(auto_error=False)


# =====================================================
# AUTH
# =====================================================
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> UserModel:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Access token required")

    try:
        user_id = decode_access_token(credentials.credentials)
    except (jwt.PyJWTError, ValueError) as e:
        logger.info(f"Token verification error: {e}")
        raise HTTPException(status_code=403, detail="Invalid token")

    user = UserRepo(db).get_user(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid token")
    if not user.email_verified:
        raise HTTPException(status_code=401, detail="Email verification required")
    return user


def require_admin(user: UserModel = Depends(get_current_user)) -> UserModel:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


# =====================================================
# COLLABORATORS (overridden in tests)
# =====================================================
def get_gateway() -> PaystackClient:
    return PaystackClient()


def get_notifier() -> NotificationService:
    return NotificationService()


def get_webhook_secret() -> str:
    return PAYSTACK_SECRET_KEY


# =====================================================
# SERVICES
# =====================================================
def get_discount_service(db: Session = Depends(get_db)) -> DiscountService:
    return DiscountService(DiscountRepo(db))


def get_checkout_service(
    db: Session = Depends(get_db),
    gateway: PaystackClient = Depends(get_gateway),
) -> CheckoutService:
    return CheckoutService(
        order_repo=OrderRepo(db),
        user_repo=UserRepo(db),
        discount_service=DiscountService(DiscountRepo(db)),
        gateway=gateway,
    )


def get_webhook_service(
    db: Session = Depends(get_db),
    notifier: NotificationService = Depends(get_notifier),
    secret: str = Depends(get_webhook_secret),
) -> WebhookService:
    return WebhookService(OrderRepo(db), notifier, secret)


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(OrderRepo(db), UserRepo(db))
