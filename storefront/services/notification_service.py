# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.domain.schemas import OrderOut
from storefront.services.email_client import EmailClient
from storefront.utils.settings import SELLER_EMAIL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Order emails, sent from Celery workers.

    Enqueue errors are logged and dropped: a payment confirmation must not
    fail because the broker or the email API is down.
    """

    def send_seller_order_notice(self, order: OrderOut):
        self._enqueue(send_seller_order_notice_task, order)

    def send_buyer_delivery_confirmation(self, order: OrderOut):
        self._enqueue(send_buyer_delivery_confirmation_task, order)

    @staticmethod
    def _enqueue(task, order: OrderOut):
        try:
            task.delay(order.model_dump(mode="json"))
        except Exception as e:
            logger.error(f"Failed to enqueue {task.name} for order {order.id}: {e}")


def _money(value) -> str:
    return f"₦{float(value):,.2f}"


def _items_rows(order: OrderOut) -> str:
    rows = []
    for item in order.items:
        variant = " / ".join(v for v in (item.size, item.color) if v)
        rows.append(
            f"<tr><td>{item.name}{f' ({variant})' if variant else ''}</td>"
            f"<td>{item.quantity}</td><td>{_money(item.unit_price * item.quantity)}</td></tr>"
        )
    return "".join(rows)


def seller_notice(order: OrderOut) -> tuple[str, str]:
    c = order.customer_details
    subject = f"New Order #{order.id} - {_money(order.total_amount)}"
    html = (
        f"<h2>New order #{order.id}</h2>"
        f"<p>{c.name}<br>{c.email}<br>{c.phone}<br>{c.address}, {c.state}</p>"
        f"<table>{_items_rows(order)}</table>"
        f"<p>Subtotal: {_money(order.subtotal)}<br>"
        f"Discount{f' ({order.promo_code})' if order.promo_code else ''}: -{_money(order.discount_amount)}<br>"
        f"Shipping: {_money(order.shipping_fee)}<br>"
        f"<strong>Total: {_money(order.total_amount)}</strong></p>"
        f"<p>Reference: {order.paystack_reference}</p>"
    )
    return subject, html


def buyer_confirmation(order: OrderOut) -> tuple[str, str]:
    c = order.customer_details
    subject = f"Order Confirmed #{order.id} - Delivery in 3-7 Days"
    eta = order.estimated_delivery_date.isoformat() if order.estimated_delivery_date else "3-7 business days"
    html = (
        f"<h2>Thank you, {c.name}!</h2>"
        f"<p>Your payment was received and your order is being prepared.</p>"
        f"<table>{_items_rows(order)}</table>"
        f"<p><strong>Total paid: {_money(order.total_amount)}</strong></p>"
        f"<p>Delivering to {c.address}, {c.state}. Estimated delivery: {eta}.</p>"
    )
    return subject, html


@celery_app.task(name="storefront.services.notification_service.send_seller_order_notice_task")
def send_seller_order_notice_task(order: dict):
    snapshot = OrderOut.model_validate(order)
    subject, html = seller_notice(snapshot)
    sent = EmailClient().send(SELLER_EMAIL, subject, html)
    logger.info(f"[NOTIFICATION] seller notice for order {snapshot.id} sent={sent}")
    return {"order_id": str(snapshot.id), "sent": sent}


@celery_app.task(name="storefront.services.notification_service.send_buyer_delivery_confirmation_task")
def send_buyer_delivery_confirmation_task(order: dict):
    snapshot = OrderOut.model_validate(order)
    subject, html = buyer_confirmation(snapshot)
    sent = EmailClient().send(snapshot.customer_details.email, subject, html)
    logger.info(f"[NOTIFICATION] buyer confirmation for order {snapshot.id} sent={sent}")
    return {"order_id": str(snapshot.id), "sent": sent}
