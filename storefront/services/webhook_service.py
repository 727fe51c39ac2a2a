# storefront/services/webhook_service.py
import hashlib
import hmac
import json
from enum import Enum

from storefront.domain.order_status import OrderStatus
from storefront.repos.order_repo import OrderRepo
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import order_to_out
from storefront.utils.errors import (
    AuthenticityFailure,
    MalformedWebhook,
    NotFoundOnWebhook,
    WebhookConfigurationError,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SUCCESS_EVENT = "charge.success"


class WebhookOutcome(str, Enum):
    TRANSITIONED = "transitioned"
    DUPLICATE = "duplicate"
    NOT_FOUND = "not_found"
    IGNORED = "ignored"


def sign(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), raw_body, hashlib.sha512).hexdigest()


def verify_signature(raw_body: bytes, signature: str | None, secret: str):
    """Paystack signs the raw body with HMAC-SHA512 keyed by the secret key."""
    if not signature:
        raise AuthenticityFailure("Missing webhook signature")
    if not hmac.compare_digest(sign(raw_body, secret), signature.strip().lower()):
        raise AuthenticityFailure("Invalid webhook signature")


def target_status(event_name: str) -> OrderStatus | None:
    if event_name == SUCCESS_EVENT:
        return OrderStatus.COMPLETED
    if "failed" in event_name:
        return OrderStatus.PAYMENT_FAILED
    return None


def parse_event(raw_body: bytes) -> tuple[str, str | None]:
    """Event name and data.reference. Only handled events need a reference."""
    try:
        event = json.loads(raw_body)
    except ValueError as e:
        raise MalformedWebhook("Webhook body is not valid JSON") from e

    name = event.get("event") if isinstance(event, dict) else None
    if not isinstance(name, str) or not name:
        raise MalformedWebhook("Webhook body must contain an event name")

    data = event.get("data")
    reference = data.get("reference") if isinstance(data, dict) else None
    if not isinstance(reference, str) or not reference:
        reference = None
    return name, reference


class WebhookService:
    """
    Reconciles Paystack payment events with pending orders.

    Delivery is at-least-once, so every transition is a conditional update
    out of 'pending'. Emails go out only from the delivery that actually
    moved the order.
    """

    def __init__(self, order_repo: OrderRepo, notifier: NotificationService, secret_key: str):
        self.repo = order_repo
        self.notifier = notifier
        self.secret_key = secret_key

    def handle(self, raw_body: bytes, signature: str | None) -> WebhookOutcome:
        if not self.secret_key:
            raise WebhookConfigurationError("Missing Paystack secret key")

        verify_signature(raw_body, signature, self.secret_key)
        event_name, reference = parse_event(raw_body)

        target = target_status(event_name)
        if target is None:
            logger.info(f"Webhook event {event_name} ignored (reference={reference})")
            return WebhookOutcome.IGNORED
        if reference is None:
            raise MalformedWebhook(f"Webhook {event_name} must contain data.reference")

        try:
            return self._apply(reference, target)
        except NotFoundOnWebhook as e:
            logger.warning(f"Webhook {event_name}: {e}")
            return WebhookOutcome.NOT_FOUND

    def _apply(self, reference: str, target: OrderStatus) -> WebhookOutcome:
        rowcount = self.repo.transition_from_pending(reference, target.value)

        if rowcount == 0:
            order = self.repo.get_order_by_reference(reference)
            if order is None:
                raise NotFoundOnWebhook(reference)
            if order.status == target.value:
                logger.info(f"Order {order.id} already {order.status}, replay of {reference} ignored")
            else:
                logger.warning(
                    f"Order {order.id} is {order.status}, refusing {target.value} for {reference}"
                )
            return WebhookOutcome.DUPLICATE

        logger.info(f"Order status updated for reference {reference} to {target.value}")

        if target is OrderStatus.COMPLETED:
            self._notify(reference)

        return WebhookOutcome.TRANSITIONED

    def _notify(self, reference: str):
        # the status change is committed; a notification problem must not undo the ack
        try:
            order = order_to_out(self.repo.get_order_by_reference(reference))
            self.notifier.send_seller_order_notice(order)
            self.notifier.send_buyer_delivery_confirmation(order)
        except Exception as e:
            logger.error(f"Order confirmation emails for {reference} not queued: {e}")
