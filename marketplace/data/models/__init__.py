#import all models so SQLAlchemy registers them in Base.metadata

from marketplace.data.models.user import UserModel
from marketplace.data.models.vendor import VendorModel
from marketplace.data.models.buyer import BuyerModel
from marketplace.data.models.category import CategoryModel
from marketplace.data.models.product import ProductModel
from marketplace.data.models.cart import CartModel
from marketplace.data.models.cart_item import CartItemModel
from marketplace.data.models.order import OrderModel
from marketplace.data.models.order_item import OrderItemModel

__all__ = [
    "UserModel",
    "VendorModel",
    "BuyerModel",
    "CategoryModel",
    "ProductModel",
    "CartModel",
    "CartItemModel",
    "OrderModel",
    "OrderItemModel",
]
