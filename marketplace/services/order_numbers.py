# marketplace/services/order_numbers.py
import threading
from datetime import datetime, timezone
from typing import Callable


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderNumberGenerator:
    """
    Thread-safe source of order numbers: ORD-<YYYYMMDDHHMMSS>-<NNNN>.

    The sequence restarts at 0000 on every new UTC second and counts up while
    the second stays the same. More than 10 000 numbers in one second repeat.
    """

    PREFIX = "ORD"

    def __init__(self, clock: Callable[[], datetime] = _utc_now):
        self._clock = clock
        self._lock = threading.Lock()
        self._last_second: int | None = None
        self._sequence = 0

    def next(self) -> str:
        with self._lock:
            now = self._clock()
            second = int(now.timestamp())

            if second != self._last_second:
                self._last_second = second
                self._sequence = 0
            else:
                self._sequence += 1

            sequence = self._sequence

        # four digits: past 10000 numbers in one second the value wraps and orders.order_number rejects the duplicate
        return f"{self.PREFIX}-{now.strftime('%Y%m%d%H%M%S')}-{sequence % 10000:04d}"
