# storefront/api/routers/payments.py
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from storefront.api.deps import get_checkout_service, get_current_user, get_webhook_service
from storefront.data.models.user import UserModel
from storefront.domain.schemas import CheckoutIn, CheckoutOut
from storefront.services.checkout_service import CheckoutService
from storefront.services.webhook_service import WebhookService
from storefront.utils.errors import (
    AuthenticityFailure,
    GatewayError,
    MalformedWebhook,
    ProfileMissing,
    ValidationError,
    WebhookConfigurationError,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["payments"])


@router.post("/process-payment", response_model=CheckoutOut)
def process_payment(
    payload: CheckoutIn,
    user: UserModel = Depends(get_current_user),
    svc: CheckoutService = Depends(get_checkout_service),
):
    """
    Opens a Paystack transaction and stores a pending order.
    The client sends the browser on to authorization_url.
    """
    try:
        result = svc.checkout(
            user_id=user.id,
            items=payload.items,
            customer_details=payload.customer_details,
            discount_percent=payload.discount,
            promo_code=payload.promo_code,
            shipping_fee=payload.shipping_fee,
        )
    except (ValidationError, GatewayError, ProfileMissing) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SQLAlchemyError as e:
        logger.error(f"Process payment error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return CheckoutOut(authorization_url=result.authorization_url, reference=result.reference)


@router.post("/paystack-webhook", response_class=PlainTextResponse)
async def paystack_webhook(
    request: Request,
    svc: WebhookService = Depends(get_webhook_service),
):
    # the signature covers the raw bytes, so read them before any JSON parsing
    raw_body = await request.body()
    signature = request.headers.get("x-paystack-signature")

    try:
        outcome = await run_in_threadpool(svc.handle, raw_body, signature)
    except AuthenticityFailure as e:
        logger.warning(f"Rejected webhook from {request.client.host if request.client else '?'}: {e}")
        raise HTTPException(status_code=401, detail=str(e))
    except MalformedWebhook as e:
        raise HTTPException(status_code=400, detail=str(e))
    except WebhookConfigurationError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Server configuration error")
    except SQLAlchemyError as e:
        # transient: let Paystack redeliver
        logger.error(f"Webhook handler database error: {e}")
        raise HTTPException(status_code=503, detail="Temporarily unavailable")

    logger.info(f"Webhook processed: {outcome.value}")
    return PlainTextResponse("Webhook received", status_code=200)
