from decimal import Decimal

import pytest

from marketplace.data.models import OrderModel
from marketplace.domain.errors import ForbiddenError, InvalidInputError, NotFoundError
from marketplace.services.order_service import OrderService


@pytest.fixture
def placed(db, market, fill_cart, checkout_service, checkout_input):
    """Two orders for the buyer (vendors A and B) placed by one multi-vendor checkout."""
    fill_cart(market.buyer_user_id, [(market.a1, 2), (market.a2, 1), (market.b1, 1)])
    result = checkout_service.checkout_multi_vendor(market.buyer_user_id, checkout_input)
    return {o["vendor"]["id"]: o["id"] for o in result["orders"]}


@pytest.fixture
def orders(db):
    return OrderService(db)


def test_get_order(orders, market, placed):
    order = orders.get_order(placed[market.vendor_a_id])

    assert order["vendor_id"] == market.vendor_a_id
    assert order["user_id"] == market.buyer_user_id
    assert order["order_number"].startswith("ORD-")


def test_get_order_not_found(orders, market):
    with pytest.raises(NotFoundError):
        orders.get_order(999)


def test_order_details_include_vendor_and_items(orders, market, placed):
    details = orders.get_order_details(placed[market.vendor_a_id])

    assert details["order"]["vendor"]["name"] == "Green Farm"
    assert details["order"]["vendor"]["email"] == "a@farm.example"

    items = {i["product_sku"]: i for i in details["items"]}
    assert set(items) == {"A-1", "A-2"}
    assert items["A-1"]["subtotal"] == Decimal("20.00")
    assert items["A-2"]["product_name"] == "Lettuce"


def test_user_orders(orders, market, placed):
    result = orders.get_user_orders(market.buyer_user_id)

    assert sorted(o["id"] for o in result) == sorted(placed.values())
    assert orders.get_user_orders(market.second_buyer_id) == []


def test_user_orders_grouped_by_vendor_name(orders, market, placed):
    grouped = orders.get_user_orders_by_vendor(market.buyer_user_id)["orders_by_vendor"]

    assert set(grouped) == {"Green Farm", "Hill Dairy"}
    assert [o["id"] for o in grouped["Hill Dairy"]] == [placed[market.vendor_b_id]]


def test_vendor_orders_carry_buyer_name(orders, market, placed):
    result = orders.get_vendor_orders(market.vendor_b_id)

    assert result["total"] == 1
    assert result["orders"][0]["buyer_name"] == "Ana Buyer"


def test_vendor_order_details_hidden_from_other_vendor(orders, market, placed):
    details = orders.get_vendor_order_details(market.vendor_a_id, placed[market.vendor_a_id])
    assert details["order"]["buyer_phone"] == ""
    assert len(details["items"]) == 2

    with pytest.raises(NotFoundError):
        orders.get_vendor_order_details(market.vendor_b_id, placed[market.vendor_a_id])


def test_vendor_statistics(db, orders, market, placed):
    orders.update_order_status(market.vendor_a_id, placed[market.vendor_a_id], "shipped")

    stats = orders.get_vendor_statistics(market.vendor_a_id)

    assert stats["total_orders"] == 1
    assert stats["shipped"] == 1
    assert stats["pending"] == 0
    assert stats["total_revenue"] == Decimal("22.50")


def test_statistics_for_vendor_without_orders(orders, market):
    stats = orders.get_vendor_statistics(market.vendor_b_id)

    assert stats["total_orders"] == 0
    assert stats["cancelled"] == 0
    assert stats["total_revenue"] == Decimal("0.00")


def test_vendor_updates_own_order_status(db, orders, market, placed):
    result = orders.update_order_status(market.vendor_b_id, placed[market.vendor_b_id], "processing")

    assert result["status"] == "processing"
    assert db.get(OrderModel, placed[market.vendor_b_id]).status == "processing"


def test_any_transition_between_known_statuses_is_allowed(db, orders, market, placed):
    order_id = placed[market.vendor_b_id]
    orders.update_order_status(market.vendor_b_id, order_id, "delivered")
    orders.update_order_status(market.vendor_b_id, order_id, "pending")

    assert db.get(OrderModel, order_id).status == "pending"


def test_other_vendor_cannot_update_status(db, orders, market, placed):
    order_id = placed[market.vendor_a_id]

    with pytest.raises(ForbiddenError):
        orders.update_order_status(market.vendor_b_id, order_id, "cancelled")

    assert db.get(OrderModel, order_id).status == "pending"


def test_unknown_status_is_rejected(orders, market, placed):
    with pytest.raises(InvalidInputError) as exc:
        orders.update_order_status(market.vendor_a_id, placed[market.vendor_a_id], "lost")

    assert exc.value.field == "status"


def test_status_update_on_missing_order(orders, market):
    with pytest.raises(NotFoundError):
        orders.update_order_status(market.vendor_a_id, 12345, "shipped")
