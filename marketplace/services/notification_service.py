# marketplace/services/notification_service.py
from kombu.exceptions import OperationalError

from marketplace.celery_worker import celery_app
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Sends order notifications to vendors.
    Uses Celery so checkout never waits on delivery.
    """

    def send_order_notification(self, vendor_id: int, order_id: int, order_number: str) -> bool:
        """
        Queues a "new order" notification. Returns False if the broker is down;
        the order is already committed at this point, so that is only logged.
        """
        try:
            send_order_notification_task.delay(vendor_id, order_id, order_number)
        except OperationalError:
            logger.exception(f"Could not queue notification for order {order_number}")
            return False
        return True


@celery_app.task(name="marketplace.services.notification_service.send_order_notification_task")
def send_order_notification_task(vendor_id: int, order_id: int, order_number: str):
    """
    Celery task - a real deployment would send email/SMS/push here.
    For now it only logs.
    """
    logger.info(f"[NOTIFICATION] Vendor {vendor_id}: new order {order_number} (id {order_id})")

    return {"vendor_id": vendor_id, "order_id": order_id, "order_number": order_number, "status": "sent"}
