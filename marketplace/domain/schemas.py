# marketplace/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Dict, List, Optional
from decimal import Decimal
from datetime import datetime


# ----- users / vendors / catalog -----

class UserCreate(BaseModel):
    """Schema for creating a user."""

    id: Optional[int] = Field(None, gt=0, description="User ID (optional, must be > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="User name")
    email: Optional[str] = Field(None, max_length=255)


class UserRead(BaseModel):
    id: int
    name: str
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class VendorCreate(BaseModel):
    """Schema for registering a vendor profile for an existing user."""

    user_id: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=150)
    email: str = Field(..., min_length=3, max_length=255)
    tax_id: str = Field(..., min_length=1, max_length=32, description="Tax identifier (unique)")
    description: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None


class VendorRead(BaseModel):
    id: int
    user_id: int
    name: str
    email: str
    tax_id: str
    description: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CategoryRead(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    """Schema for creating a product owned by a user."""

    sku: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, description="Unit price")
    quantity: int = Field(0, ge=0, description="Available stock")
    user_id: int = Field(..., gt=0, description="Owning user, resolves the vendor")
    category_id: Optional[int] = Field(None, gt=0)


class ProductRead(BaseModel):
    id: int
    sku: str
    name: str
    description: Optional[str] = None
    price: Decimal
    quantity: int
    user_id: int
    category_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


# ----- carts -----

class CreateCartIn(BaseModel):
    """Schema for creating a cart."""

    user_id: int = Field(..., gt=0, description="User ID (must be > 0)")


class ItemIn(BaseModel):
    """Schema for adding a product to a cart."""

    product_id: int = Field(..., gt=0, description="Product ID (must be > 0)")
    quantity: int = Field(..., gt=0, description="Quantity (must be > 0)")


class QuantityIn(BaseModel):
    quantity: int = Field(..., gt=0)


class CartItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    price: Decimal


class CartOut(BaseModel):
    cart_id: int
    code: str
    user_id: int
    created_at: datetime
    items: List[CartItemOut]
    total: Decimal

    model_config = ConfigDict(from_attributes=True)


# ----- checkout / orders -----

class CheckoutIn(BaseModel):
    """Blank values are rejected by the checkout service, naming the field."""

    payment_method: str = ""
    shipping_address: str = ""
    shipping_city: str = ""
    shipping_state: str = ""
    shipping_postal_code: str = ""
    buyer_id: Optional[int] = Field(None, gt=0)


class VendorInfo(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class OrderOut(BaseModel):
    id: int
    order_number: str
    status: str
    total: Decimal
    payment_method: str
    shipping_address: str
    shipping_city: str
    shipping_state: str
    shipping_postal_code: str
    created_at: datetime
    user_id: int
    vendor_id: int
    buyer_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class OrderWithVendorOut(OrderOut):
    vendor: VendorInfo


class MultiVendorCheckoutOut(BaseModel):
    success: bool = True
    message: str
    total_orders: int
    orders: List[OrderWithVendorOut]


class OrderItemOut(BaseModel):
    id: int
    quantity: int
    price: Decimal
    order_id: int
    product_id: int
    product_name: str
    product_sku: str
    subtotal: Decimal


class OrderDetailsOut(BaseModel):
    order: OrderWithVendorOut
    items: List[OrderItemOut]


class OrdersByVendorOut(BaseModel):
    orders_by_vendor: Dict[str, List[OrderOut]]


class VendorOrderOut(OrderOut):
    buyer_name: str


class VendorOrdersOut(BaseModel):
    total: int
    orders: List[VendorOrderOut]


class VendorOrderDetailOut(VendorOrderOut):
    buyer_phone: str = ""


class VendorOrderDetailsOut(BaseModel):
    order: VendorOrderDetailOut
    items: List[OrderItemOut]


class StatusIn(BaseModel):
    status: str


class StatusOut(BaseModel):
    success: bool = True
    message: str
    status: str


class VendorStatisticsOut(BaseModel):
    total_orders: int
    pending: int
    processing: int
    shipped: int
    delivered: int
    cancelled: int
    total_revenue: Decimal
