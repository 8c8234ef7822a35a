from sqlalchemy import Column, Integer, ForeignKey, String, Numeric, CheckConstraint

from marketplace.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    sku = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=0)  # available stock

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),)
