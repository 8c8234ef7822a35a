# marketplace/services/product_service.py
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List

from sqlalchemy.orm import Session

from marketplace.data.models.category import CategoryModel
from marketplace.data.models.product import ProductModel
from marketplace.domain.errors import ConflictError, InvalidInputError, NotFoundError
from marketplace.domain.schemas import CategoryCreate, CategoryRead, ProductCreate, ProductRead
from marketplace.repos.product_repo import ProductRepo
from marketplace.repos.user_repo import UserRepo


def _text(field: str, allow_empty: bool = False) -> Callable[[Any], str]:
    def parse(value):
        if not isinstance(value, str) or (not allow_empty and not value.strip()):
            raise InvalidInputError(field, f"Field '{field}' must be a non-empty string")
        return value.strip()
    return parse


def _price(value) -> Decimal:
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise InvalidInputError("price", "Price must be a number")
    if not price.is_finite():
        raise InvalidInputError("price", "Price must be a number")
    if price < 0:
        raise InvalidInputError("price", "Price must not be negative")
    return price


def _stock(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidInputError("quantity", "Quantity must be a non-negative integer")
    return value


def _optional_id(field: str) -> Callable[[Any], int | None]:
    def parse(value):
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidInputError(field, f"Field '{field}' must be a positive integer")
        return value
    return parse


# the only columns a product update may touch
UPDATABLE_FIELDS: Dict[str, Callable[[Any], Any]] = {
    "name": _text("name"),
    "description": _text("description", allow_empty=True),
    "price": _price,
    "quantity": _stock,
    "category_id": _optional_id("category_id"),
}


class ProductService:
    def __init__(self, db: Session):
        self.repo = ProductRepo(db)
        self.users = UserRepo(db)

    def create_product(self, payload: ProductCreate) -> ProductRead:
        if not self.users.get_user(payload.user_id):
            raise NotFoundError("user")

        if self.repo.get_by_sku(payload.sku):
            raise ConflictError(f"SKU '{payload.sku}' already exists")

        self._check_category(payload.category_id)

        product = self.repo.create_product(ProductModel(**payload.model_dump()))
        return ProductRead.model_validate(product)

    def get_product(self, product_id: int) -> ProductRead:
        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("product")
        return ProductRead.model_validate(product)

    def update_product(self, product_id: int, changes: Dict[str, Any]) -> ProductRead:
        """
        Applies only fields from UPDATABLE_FIELDS; any other key is rejected
        so a request body can never reach sku, owner or id.
        """
        unknown = sorted(set(changes) - set(UPDATABLE_FIELDS))
        if unknown:
            raise InvalidInputError(unknown[0], f"Field '{unknown[0]}' cannot be updated")

        if not changes:
            raise InvalidInputError("body", "No fields to update")

        product = self.repo.get_product(product_id)
        if not product:
            raise NotFoundError("product")

        values = {name: UPDATABLE_FIELDS[name](value) for name, value in changes.items()}

        if "category_id" in values:
            self._check_category(values["category_id"])

        updated = self.repo.update_product(product, values)
        return ProductRead.model_validate(updated)

    def create_category(self, payload: CategoryCreate) -> CategoryRead:
        if self.repo.get_category_by_name(payload.name):
            raise ConflictError(f"Category '{payload.name}' already exists")
        category = self.repo.create_category(CategoryModel(name=payload.name))
        return CategoryRead.model_validate(category)

    def list_categories(self) -> List[CategoryRead]:
        return [CategoryRead.model_validate(c) for c in self.repo.list_categories()]

    def _check_category(self, category_id: int | None):
        if category_id is not None and not self.repo.get_category(category_id):
            raise NotFoundError("category")
