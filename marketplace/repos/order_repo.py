# marketplace/repos/order_repo.py
from typing import Any, Dict, List

from sqlalchemy import select, func, case
from sqlalchemy.orm import Session

from marketplace.data.models.buyer import BuyerModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.user import UserModel
from marketplace.data.models.vendor import VendorModel
from marketplace.domain.order_status import OrderStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    # ----- writes (flushed, committed by the service) -----

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_order_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def update_order_status(self, order: OrderModel, status: str) -> OrderModel:
        order.status = status
        self.db.flush()
        return order

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    # ----- reads -----

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_with_vendor(self, order_id: int):
        """(order, vendor) or None."""
        return self.db.execute(
            select(OrderModel, VendorModel)
            .join(VendorModel, OrderModel.vendor_id == VendorModel.id)
            .where(OrderModel.id == order_id)
        ).first()

    def list_user_orders(self, user_id: int) -> List[OrderModel]:
        return list(
            self.db.execute(
                select(OrderModel)
                .where(OrderModel.user_id == user_id)
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def list_user_orders_with_vendor(self, user_id: int):
        """Rows of (order, vendor)."""
        return self.db.execute(
            select(OrderModel, VendorModel)
            .join(VendorModel, OrderModel.vendor_id == VendorModel.id)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        ).all()

    def list_vendor_orders(self, vendor_id: int):
        """Rows of (order, buyer_name); buyer name comes from the ordering user."""
        return self.db.execute(
            select(OrderModel, UserModel.name)
            .join(UserModel, OrderModel.user_id == UserModel.id)
            .where(OrderModel.vendor_id == vendor_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        ).all()

    def get_vendor_order(self, order_id: int, vendor_id: int):
        """(order, buyer_name, buyer_phone) or None when not this vendor's order."""
        return self.db.execute(
            select(OrderModel, UserModel.name, func.coalesce(BuyerModel.phone, ""))
            .join(UserModel, OrderModel.user_id == UserModel.id)
            .outerjoin(BuyerModel, OrderModel.buyer_id == BuyerModel.id)
            .where(OrderModel.id == order_id, OrderModel.vendor_id == vendor_id)
        ).first()

    def get_order_items(self, order_id: int):
        """Rows of (order_item, product_name, product_sku)."""
        return self.db.execute(
            select(OrderItemModel, ProductModel.name, ProductModel.sku)
            .join(ProductModel, OrderItemModel.product_id == ProductModel.id)
            .where(OrderItemModel.order_id == order_id)
            .order_by(OrderItemModel.id)
        ).all()

    def vendor_statistics(self, vendor_id: int) -> Dict[str, Any]:
        def count_status(status: OrderStatus):
            return func.coalesce(
                func.sum(case((OrderModel.status == status.value, 1), else_=0)), 0
            ).label(status.value)

        row = self.db.execute(
            select(
                func.count(OrderModel.id).label("total_orders"),
                *[count_status(s) for s in OrderStatus],
                func.coalesce(func.sum(OrderModel.total), 0).label("total_revenue"),
            ).where(OrderModel.vendor_id == vendor_id)
        ).one()

        return dict(row._mapping)
