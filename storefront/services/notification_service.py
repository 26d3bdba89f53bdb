# storefront/services/notification_service.py
from typing import Any, Dict

from storefront.celery_worker import celery_app
from storefront.services.mail_client import MailClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ORDER_CONFIRMATION_SUBJECT = "Order Confirmation"


def render_order_confirmation(order_number: str, total_amount: str) -> str:
    return (
        "<h1>Order Confirmation</h1>"
        "<p>Thank you for your order!</p>"
        f"<p>Order Number: {order_number}</p>"
        f"<p>Total: ${total_amount}</p>"
        "<p>Your order is being processed and will be shipped soon.</p>"
    )


class NotificationService:
    """
    Sends notifications.
    Uses Celery so the caller never waits for mail delivery.
    """

    @staticmethod
    def send_order_confirmation(to_address: str, order: Dict[str, Any]) -> bool:
        """
        Fire-and-forget: enqueue failures are logged, never raised.
        """
        try:
            send_order_confirmation_task.delay(
                to_address,
                order["order_number"],
                f"{order['total_amount']:.2f}",
            )
        except Exception as e:
            logger.error(
                f"Could not enqueue confirmation for order {order['order_number']}: {e}"
            )
            return False
        return True


@celery_app.task(name="storefront.services.notification_service.send_order_confirmation_task")
def send_order_confirmation_task(to_address: str, order_number: str, total_amount: str):
    html = render_order_confirmation(order_number, total_amount)
    try:
        sent = MailClient().send(to_address, ORDER_CONFIRMATION_SUBJECT, html)
    except Exception as e:
        logger.error(f"[NOTIFICATION] Order {order_number}: email to {to_address} failed: {e}")
        return {"order_number": order_number, "status": "failed"}

    status = "sent" if sent else "skipped"
    logger.info(f"[NOTIFICATION] Order {order_number}: confirmation {status} to {to_address}")
    return {"order_number": order_number, "status": status}
