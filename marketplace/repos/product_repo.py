# marketplace/repos/product_repo.py
from typing import Any, Dict, List

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from marketplace.data.models.category import CategoryModel
from marketplace.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def get_by_sku(self, sku: str) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(ProductModel.sku == sku)
        ).scalar_one_or_none()

    def create_product(self, product: ProductModel) -> ProductModel:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product

    def update_product(self, product: ProductModel, values: Dict[str, Any]) -> ProductModel:
        for column, value in values.items():
            setattr(product, column, value)
        self.db.commit()
        self.db.refresh(product)
        return product

    def get_stock(self, product_id: int) -> int | None:
        return self.db.execute(
            select(ProductModel.quantity).where(ProductModel.id == product_id)
        ).scalar_one_or_none()

    def decrement_stock(self, product_id: int, quantity: int) -> int:
        """
        Guarded decrement, only applied while enough stock remains.
        Returns affected rows: 0 means another writer took the stock first.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.quantity >= quantity)
            .values(quantity=ProductModel.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def get_category_by_name(self, name: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel).where(CategoryModel.name == name)
        ).scalar_one_or_none()

    def create_category(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def list_categories(self) -> List[CategoryModel]:
        return list(self.db.execute(select(CategoryModel).order_by(CategoryModel.name)).scalars())
