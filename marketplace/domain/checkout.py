# marketplace/domain/checkout.py
"""
Pure checkout pieces, free of any session or HTTP concern.

- CheckoutLine: one cart item resolved against its product and vendor
- validate_checkout_input: required shipping/payment fields
- has_enough_stock / first_shortfall: stock validation per line
- partition_by_vendor: one VendorGroup per vendor present in the cart
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from marketplace.domain.errors import InvalidInputError, InsufficientStockError, InvalidStateError

# order matters: the first missing field is the one reported
REQUIRED_CHECKOUT_FIELDS = (
    "payment_method",
    "shipping_address",
    "shipping_city",
    "shipping_state",
    "shipping_postal_code",
)


@dataclass(frozen=True)
class CheckoutInput:
    payment_method: str
    shipping_address: str
    shipping_city: str
    shipping_state: str
    shipping_postal_code: str
    buyer_id: Optional[int] = None


@dataclass(frozen=True)
class CheckoutLine:
    cart_item_id: int
    product_id: int
    product_name: str
    quantity: int
    price: Decimal
    stock: int
    vendor_id: Optional[int]
    vendor_name: Optional[str] = None
    vendor_email: Optional[str] = None
    vendor_phone: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


@dataclass
class VendorGroup:
    vendor_id: int
    vendor_name: str
    vendor_email: Optional[str]
    vendor_phone: Optional[str]
    lines: List[CheckoutLine] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0.00"))


def validate_checkout_input(data: CheckoutInput) -> CheckoutInput:
    """Returns a copy with stripped strings; raises on the first blank field."""
    cleaned = {}
    for name in REQUIRED_CHECKOUT_FIELDS:
        value = getattr(data, name)
        if value is None or not str(value).strip():
            raise InvalidInputError(name)
        cleaned[name] = str(value).strip()

    return CheckoutInput(buyer_id=data.buyer_id, **cleaned)


def has_enough_stock(line: CheckoutLine) -> bool:
    return line.quantity <= line.stock


def first_shortfall(lines: Iterable[CheckoutLine]) -> Optional[CheckoutLine]:
    # each line is checked on its own, quantities are not summed per product
    for line in lines:
        if not has_enough_stock(line):
            return line
    return None


def ensure_stock(lines: Iterable[CheckoutLine]) -> None:
    short = first_shortfall(lines)
    if short is not None:
        raise InsufficientStockError(
            product_id=short.product_id,
            product_name=short.product_name,
            requested=short.quantity,
            available=short.stock,
        )


def partition_by_vendor(lines: Iterable[CheckoutLine]) -> Dict[int, VendorGroup]:
    """
    Groups lines by the vendor owning each product.

    Every line lands in exactly one group; vendors without lines never show up.
    Callers must not depend on the iteration order of the result.
    """
    groups: Dict[int, VendorGroup] = {}

    for line in lines:
        if line.vendor_id is None:
            raise InvalidStateError(f"Product '{line.product_name}' has no vendor")

        group = groups.get(line.vendor_id)
        if group is None:
            group = VendorGroup(
                vendor_id=line.vendor_id,
                vendor_name=line.vendor_name or "",
                vendor_email=line.vendor_email,
                vendor_phone=line.vendor_phone,
            )
            groups[line.vendor_id] = group

        group.lines.append(line)

    return groups
