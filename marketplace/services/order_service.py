# marketplace/services/order_service.py
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from marketplace.domain.errors import ForbiddenError, InvalidInputError, NotFoundError
from marketplace.domain.order_status import OrderStatus
from marketplace.repos.order_repo import OrderRepo
from marketplace.services.checkout_service import order_to_dict
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def _vendor_info(vendor) -> Dict[str, Any]:
    return {"id": vendor.id, "name": vendor.name, "email": vendor.email, "phone": vendor.phone}


class OrderService:
    """
    Read side of orders plus the vendor status update.
    Queries never open an explicit transaction.
    """

    def __init__(self, db: Session):
        self.repo = OrderRepo(db)

    def get_order(self, order_id: int) -> Dict[str, Any]:
        order = self.repo.get_order(order_id)

        if not order:
            raise NotFoundError("order")

        return order_to_dict(order)

    def get_order_details(self, order_id: int) -> Dict[str, Any]:
        """
        Order with vendor name/contact and its items (name, sku, subtotal).
        """
        row = self.repo.get_order_with_vendor(order_id)
        if not row:
            raise NotFoundError("order")

        order, vendor = row
        payload = order_to_dict(order)
        payload["vendor"] = _vendor_info(vendor)

        return {"order": payload, "items": self._items(order.id)}

    def get_user_orders(self, user_id: int) -> List[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_user_orders(user_id)]

    def get_user_orders_by_vendor(self, user_id: int) -> Dict[str, Any]:
        grouped: Dict[str, List[Dict[str, Any]]] = defaultdict(list)

        for order, vendor in self.repo.list_user_orders_with_vendor(user_id):
            grouped[vendor.name].append(order_to_dict(order))

        return {"orders_by_vendor": dict(grouped)}

    def get_vendor_orders(self, vendor_id: int) -> Dict[str, Any]:
        orders = []
        for order, buyer_name in self.repo.list_vendor_orders(vendor_id):
            payload = order_to_dict(order)
            payload["buyer_name"] = buyer_name
            orders.append(payload)

        return {"total": len(orders), "orders": orders}

    def get_vendor_order_details(self, vendor_id: int, order_id: int) -> Dict[str, Any]:
        row = self.repo.get_vendor_order(order_id, vendor_id)
        if not row:
            raise NotFoundError("order", "Order not found or not owned by this vendor")

        order, buyer_name, buyer_phone = row
        payload = order_to_dict(order)
        payload["buyer_name"] = buyer_name
        payload["buyer_phone"] = buyer_phone

        return {"order": payload, "items": self._items(order.id)}

    def get_vendor_statistics(self, vendor_id: int) -> Dict[str, Any]:
        stats = self.repo.vendor_statistics(vendor_id)

        return {
            "total_orders": int(stats["total_orders"]),
            **{s.value: int(stats[s.value]) for s in OrderStatus},
            "total_revenue": Decimal(str(stats["total_revenue"])).quantize(Decimal("0.01")),
        }

    def update_order_status(self, vendor_id: int, order_id: int, status: str) -> Dict[str, Any]:
        """
        Any status in OrderStatus may follow any other; only ownership
        and membership are checked.
        """
        if status not in OrderStatus.values():
            raise InvalidInputError(
                "status",
                f"Invalid status. Use one of: {', '.join(OrderStatus.values())}",
            )

        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("order")

        if order.vendor_id != vendor_id:
            raise ForbiddenError("You are not allowed to update this order")

        self.repo.update_order_status(order, status)
        self.repo.commit()

        logger.info(f"Order {order_id} status set to {status} by vendor {vendor_id}")

        return {
            "success": True,
            "message": "Status updated successfully",
            "status": status,
        }

    def _items(self, order_id: int) -> List[Dict[str, Any]]:
        return [
            {
                "id": item.id,
                "quantity": item.quantity,
                "price": item.price,
                "order_id": item.order_id,
                "product_id": item.product_id,
                "product_name": name,
                "product_sku": sku,
                "subtotal": item.price * item.quantity,
            }
            for item, name, sku in self.repo.get_order_items(order_id)
        ]
