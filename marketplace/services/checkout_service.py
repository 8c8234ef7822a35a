# marketplace/services/checkout_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.domain.checkout import (
    CheckoutInput,
    CheckoutLine,
    VendorGroup,
    ensure_stock,
    partition_by_vendor,
    validate_checkout_input,
)
from marketplace.domain.errors import (
    ConflictError,
    InsufficientStockError,
    InternalError,
    InvalidStateError,
    MarketplaceError,
    NotFoundError,
)
from marketplace.domain.order_status import OrderStatus
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.order_repo import OrderRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.services.lock_service import LockService
from marketplace.services.notification_service import NotificationService
from marketplace.services.order_numbers import OrderNumberGenerator
from marketplace.utils.settings import CHECKOUT_LOCK_TTL_SECONDS
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "order_number": order.order_number,
        "status": order.status,
        "total": order.total,
        "payment_method": order.payment_method,
        "shipping_address": order.shipping_address,
        "shipping_city": order.shipping_city,
        "shipping_state": order.shipping_state,
        "shipping_postal_code": order.shipping_postal_code,
        "created_at": order.created_at,
        "user_id": order.user_id,
        "vendor_id": order.vendor_id,
        "buyer_id": order.buyer_id,
    }


class CheckoutService:
    """
    Turns a user's cart into orders inside one transaction.

    checkout              -> one order, the cart must belong to a single vendor
    checkout_multi_vendor -> one order per vendor found in the cart

    Steps: validate input, resolve cart, load lines, check stock, write
    orders + items + stock, delete cart, commit. Any failure after the
    cart lookup rolls everything back and leaves the cart as it was.
    """

    def __init__(
        self,
        db: Session,
        order_numbers: OrderNumberGenerator,
        lock_service: LockService,
        notification_service: NotificationService,
    ):
        self.carts = CartRepo(db)
        self.products = ProductRepo(db)
        self.orders = OrderRepo(db)
        self.order_numbers = order_numbers
        self.lock_service = lock_service
        self.notification_service = notification_service

    def checkout(self, user_id: int, data: CheckoutInput) -> Dict[str, Any]:
        def single_group(lines: List[CheckoutLine]) -> List[VendorGroup]:
            groups = partition_by_vendor(lines)
            if len(groups) > 1:
                raise InvalidStateError(
                    "Cart contains products from several vendors, use multi-vendor checkout"
                )
            return list(groups.values())

        created = self._run(user_id, data, single_group)
        order, _ = created[0]
        return order_to_dict(order)

    def checkout_multi_vendor(self, user_id: int, data: CheckoutInput) -> Dict[str, Any]:
        def by_vendor(lines: List[CheckoutLine]) -> List[VendorGroup]:
            return list(partition_by_vendor(lines).values())

        created = self._run(user_id, data, by_vendor)

        orders = []
        for order, group in created:
            payload = order_to_dict(order)
            payload["vendor"] = {
                "id": group.vendor_id,
                "name": group.vendor_name,
                "email": group.vendor_email,
                "phone": group.vendor_phone,
            }
            orders.append(payload)

        return {
            "success": True,
            "message": "Orders created successfully",
            "total_orders": len(orders),
            "orders": orders,
        }

    def _run(self, user_id: int, data: CheckoutInput, make_groups):
        # nothing below touches the database when input is incomplete
        data = validate_checkout_input(data)

        try:
            token = self.lock_service.acquire_checkout_lock(user_id, ttl=CHECKOUT_LOCK_TTL_SECONDS)
        except RedisError as e:
            logger.error(f"[CHECKOUT] Could not acquire checkout lock for user {user_id}: {e}", exc_info=True)
            raise InternalError() from e

        if token is None:
            raise ConflictError("A checkout for this cart is already in progress")

        try:
            created = self._in_transaction(user_id, data, make_groups)
        finally:
            try:
                self.lock_service.release_checkout_lock(user_id, token)
            except RedisError as e:
                # the lock expires on its own after CHECKOUT_LOCK_TTL_SECONDS
                logger.warning(f"Failed to release checkout lock for user {user_id}: {e}")

        for order, group in created:
            self.notification_service.send_order_notification(group.vendor_id, order.id, order.order_number)

        return created

    def _in_transaction(self, user_id: int, data: CheckoutInput, make_groups):
        try:
            cart = self.carts.get_cart_by_user(user_id)
            if not cart:
                raise NotFoundError("cart")

            logger.info(f"[CHECKOUT] Cart {cart.id} found for user {user_id}")

            lines = self.carts.get_checkout_lines(cart.id)
            if not lines:
                raise InvalidStateError("Cart is empty")

            ensure_stock(lines)

            groups = make_groups(lines)
            logger.info(f"[CHECKOUT] {len(lines)} items across {len(groups)} vendor(s)")

            created_at = datetime.now(timezone.utc)
            created = [
                (self._write_order(user_id, data, group, created_at), group)
                for group in groups
            ]

            self.carts.delete_cart_items(cart.id)
            self.carts.delete_cart(cart.id)

            self.carts.commit()

        except InsufficientStockError as e:
            logger.warning(f"[CHECKOUT] {e}")
            self.carts.rollback()
            raise
        except MarketplaceError:
            self.carts.rollback()
            raise
        except SQLAlchemyError as e:
            logger.error(f"[CHECKOUT] Rolling back checkout for user {user_id}: {e}", exc_info=True)
            self.carts.rollback()
            raise InternalError() from e

        logger.info(f"[CHECKOUT] Success, {len(created)} order(s) created for user {user_id}")
        return created

    def _write_order(
        self,
        user_id: int,
        data: CheckoutInput,
        group: VendorGroup,
        created_at: datetime,
    ) -> OrderModel:
        total = group.total.quantize(Decimal("0.01"))

        order = self.orders.create_order(
            OrderModel(
                order_number=self.order_numbers.next(),
                status=OrderStatus.PENDING.value,
                total=total,
                payment_method=data.payment_method,
                shipping_address=data.shipping_address,
                shipping_city=data.shipping_city,
                shipping_state=data.shipping_state,
                shipping_postal_code=data.shipping_postal_code,
                created_at=created_at,
                user_id=user_id,
                vendor_id=group.vendor_id,
                buyer_id=data.buyer_id,
            )
        )

        logger.info(f"[CHECKOUT] Order #{order.order_number} (id {order.id}) for vendor {group.vendor_name}")

        for line in group.lines:
            self.orders.add_order_item(
                OrderItemModel(
                    order_id=order.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    price=line.price,
                )
            )

            rowcount = self.products.decrement_stock(line.product_id, line.quantity)

            # stock moved between the read and the update
            if rowcount == 0:
                available = self.products.get_stock(line.product_id)
                raise InsufficientStockError(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    requested=line.quantity,
                    available=available or 0,
                )

        return order
