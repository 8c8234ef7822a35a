import secrets
import string
from decimal import Decimal
from typing import Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from marketplace.data.models.cart import CartModel
from marketplace.data.models.cart_item import CartItemModel
from marketplace.domain.errors import (
    ForbiddenError,
    InsufficientStockError,
    InvalidInputError,
    NotFoundError,
)
from marketplace.repos.cart_repo import CartRepo
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo
from marketplace.utils.settings import CART_CODE_LENGTH
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

CART_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_cart_code(length: int = CART_CODE_LENGTH) -> str:
    return "".join(secrets.choice(CART_CODE_ALPHABET) for _ in range(length))


class CartService:
    """
    Cart use cases.
    commands (create, add, set quantity, remove) change state,
    queries (get) only read.

    Quantities are checked against stock when written; checkout checks again.
    """

    def __init__(self, db: Session):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)

    #query
    def get_cart_by_user(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("cart")
        return self._to_dict(cart)

    #commands
    def create_cart(self, user_id: int) -> Dict[str, Any]:
        """Returns the user's cart, creating it the first time."""
        if not self.users.get_user(user_id):
            raise NotFoundError("user")

        existing = self.repo.get_cart_by_user(user_id)
        if existing:
            logger.info(f"User {user_id} already has cart {existing.id}")
            return self._to_dict(existing)

        code = generate_cart_code()
        while self.repo.code_exists(code):
            code = generate_cart_code()

        try:
            created = self.repo.create_cart(CartModel(code=code, user_id=user_id))
            self.repo.commit()
        except IntegrityError:
            # a parallel request created the cart first
            self.repo.rollback()
            existing = self.repo.get_cart_by_user(user_id)
            if not existing:
                raise
            return self._to_dict(existing)

        logger.info(f"Created cart {created.id} ({created.code}) for user {user_id}")
        return self._to_dict(created)

    def add_product(self, user_id: int, cart_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise InvalidInputError("quantity", "Quantity must be greater than 0")

        cart = self._owned_cart(user_id, cart_id)

        product = self.products.get_product(product_id)
        if not product:
            raise NotFoundError("product")

        item = self.repo.get_cart_item(cart.id, product_id)
        new_quantity = quantity + (item.quantity if item else 0)

        if new_quantity > product.quantity:
            raise InsufficientStockError(product.id, product.name, new_quantity, product.quantity)

        if item:
            logger.info(
                f"Product {product_id} already in cart {cart_id}, quantity "
                f"{item.quantity} -> {new_quantity}"
            )
            item.quantity = new_quantity
            self.repo.add_cart_item(item)
        else:
            logger.info(f"Adding product {product_id} to cart {cart_id}")
            self.repo.add_cart_item(
                CartItemModel(cart_id=cart.id, product_id=product_id, quantity=quantity)
            )

        self.repo.commit()
        return self._to_dict(cart)

    def set_quantity(self, user_id: int, cart_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise InvalidInputError("quantity", "Quantity must be greater than 0")

        cart = self._owned_cart(user_id, cart_id)

        item = self.repo.get_cart_item(cart.id, product_id)
        if not item:
            raise NotFoundError("cart item")

        product = self.products.get_product(product_id)
        if quantity > product.quantity:
            raise InsufficientStockError(product.id, product.name, quantity, product.quantity)

        item.quantity = quantity
        self.repo.add_cart_item(item)
        self.repo.commit()

        return self._to_dict(cart)

    def remove_product(self, user_id: int, cart_id: int, product_id: int) -> Dict[str, Any]:
        cart = self._owned_cart(user_id, cart_id)

        logger.info(f"Removing product {product_id} from cart {cart_id}")

        if self.repo.delete_cart_item(cart.id, product_id) == 0:
            raise NotFoundError("cart item")

        self.repo.commit()
        return self._to_dict(cart)

    def _owned_cart(self, user_id: int, cart_id: int) -> CartModel:
        cart = self.repo.get_cart(cart_id)

        if not cart:
            raise NotFoundError("cart")

        if cart.user_id != user_id:
            raise ForbiddenError("No access to this cart")

        return cart

    def _to_dict(self, cart: CartModel) -> Dict[str, Any]:
        rows = self.repo.get_cart_items_with_products(cart.id)

        items = [
            {
                "id": item.id,
                "product_id": product.id,
                "product_name": product.name,
                "quantity": item.quantity,
                "price": product.price,
            }
            for item, product in rows
        ]
        total = sum((i["price"] * i["quantity"] for i in items), Decimal("0.00"))

        return {
            "cart_id": cart.id,
            "code": cart.code,
            "user_id": cart.user_id,
            "created_at": cart.created_at,
            "items": items,
            "total": total,
        }
