# marketplace/repos/cart_repo.py
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.orm import Session

from marketplace.data.models.cart import CartModel
from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.vendor import VendorModel
from marketplace.domain.checkout import CheckoutLine


class CartRepo:
    """Writes are flushed only; the calling service decides when to commit."""

    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, cart_id: int) -> CartModel | None:
        return self.db.get(CartModel, cart_id)

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel).where(CartModel.user_id == user_id)
        ).scalar_one_or_none()

    def code_exists(self, code: str) -> bool:
        return self.db.execute(
            select(CartModel.id).where(CartModel.code == code)
        ).first() is not None

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_cart_items(self, cart_id: int) -> List[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.cart_id == cart_id)
                .order_by(CartItemModel.id)
            ).scalars()
        )

    def get_cart_items_with_products(self, cart_id: int):
        return self.db.execute(
            select(CartItemModel, ProductModel)
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.id)
        ).all()

    def get_cart_item(self, cart_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, cart_id: int, product_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.product_id == product_id,
            )
        )
        return result.rowcount

    def get_checkout_lines(self, cart_id: int) -> List[CheckoutLine]:
        """
        Cart items joined with current product price/stock and the vendor
        that owns each product (products.user_id = vendors.user_id).
        vendor_id is None when the product owner has no vendor profile.
        """
        rows = self.db.execute(
            select(
                CartItemModel.id,
                CartItemModel.quantity,
                ProductModel.id,
                ProductModel.name,
                ProductModel.price,
                ProductModel.quantity,
                VendorModel.id,
                VendorModel.name,
                VendorModel.email,
                VendorModel.phone,
            )
            .join(ProductModel, CartItemModel.product_id == ProductModel.id)
            .outerjoin(VendorModel, ProductModel.user_id == VendorModel.user_id)
            .where(CartItemModel.cart_id == cart_id)
            .order_by(CartItemModel.id)
        ).all()

        return [
            CheckoutLine(
                cart_item_id=item_id,
                product_id=product_id,
                product_name=product_name,
                quantity=quantity,
                price=price,
                stock=stock,
                vendor_id=vendor_id,
                vendor_name=vendor_name,
                vendor_email=vendor_email,
                vendor_phone=vendor_phone,
            )
            for (
                item_id, quantity, product_id, product_name, price, stock,
                vendor_id, vendor_name, vendor_email, vendor_phone,
            ) in rows
        ]

    def delete_cart_items(self, cart_id: int) -> int:
        result = self.db.execute(
            delete(CartItemModel).where(CartItemModel.cart_id == cart_id)
        )
        return result.rowcount

    def delete_cart(self, cart_id: int) -> int:
        result = self.db.execute(delete(CartModel).where(CartModel.id == cart_id))
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
