import re
import threading
from datetime import datetime, timedelta, timezone

from marketplace.services.order_numbers import OrderNumberGenerator

ORDER_NUMBER = re.compile(r"^ORD-\d{14}-\d{4}$")


def test_format_uses_utc_second_and_sequence(order_numbers):
    assert order_numbers.next() == "ORD-20250301123045-0000"
    assert order_numbers.next() == "ORD-20250301123045-0001"
    assert order_numbers.next() == "ORD-20250301123045-0002"


def test_real_clock_matches_external_format():
    number = OrderNumberGenerator().next()
    assert ORDER_NUMBER.match(number)


def test_sequence_resets_when_second_changes(order_numbers, clock):
    order_numbers.next()
    order_numbers.next()

    clock.now = clock.now + timedelta(seconds=1)

    assert order_numbers.next() == "ORD-20250301123046-0000"


def test_sub_second_changes_keep_counting(order_numbers, clock):
    first = order_numbers.next()
    clock.now = clock.now + timedelta(milliseconds=400)
    second = order_numbers.next()

    assert first.endswith("-0000")
    assert second.endswith("-0001")


def test_numbers_are_unique_across_threads():
    fixed = datetime(2025, 1, 1, tzinfo=timezone.utc)
    generator = OrderNumberGenerator(clock=lambda: fixed)
    results = []
    results_lock = threading.Lock()

    def worker():
        local = [generator.next() for _ in range(500)]
        with results_lock:
            results.extend(local)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(results) == 4000
    assert len(set(results)) == 4000
    assert all(ORDER_NUMBER.match(n) for n in results)


def test_sequence_wraps_at_four_digits_within_one_second(order_numbers):
    numbers = [order_numbers.next() for _ in range(10001)]

    assert numbers[9999] == "ORD-20250301123045-9999"
    # the 10001st number repeats the first one; the unique order_number column refuses it
    assert numbers[10000] == numbers[0]
    assert len(set(numbers[:10000])) == 10000
