# marketplace/api/dependencies.py
from functools import lru_cache

from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.services.order_numbers import OrderNumberGenerator

# one generator per process, every checkout draws numbers from it
_order_numbers = OrderNumberGenerator()


def get_order_numbers() -> OrderNumberGenerator:
    return _order_numbers


@lru_cache
def get_lock_service() -> LockService:
    return LockService()


def get_notification_service() -> NotificationService:
    return NotificationService()
