from decimal import Decimal

import pytest

from marketplace.domain.errors import ConflictError, InvalidInputError, NotFoundError
from marketplace.domain.schemas import CategoryCreate, ProductCreate
from marketplace.services.product_service import ProductService


@pytest.fixture
def products(db):
    return ProductService(db)


def test_update_applies_only_listed_fields(products, market):
    updated = products.update_product(market.a1, {"price": "12.30", "quantity": 4, "name": " Roma tomatoes "})

    assert updated.price == Decimal("12.30")
    assert updated.quantity == 4
    assert updated.name == "Roma tomatoes"
    assert updated.sku == "A-1"


@pytest.mark.parametrize("field", ["sku", "user_id", "id"])
def test_update_rejects_fields_outside_the_allow_list(products, market, field):
    with pytest.raises(InvalidInputError) as exc:
        products.update_product(market.a1, {field: "x", "name": "ok"})

    assert exc.value.field == field
    assert products.get_product(market.a1).name == "Tomatoes"


@pytest.mark.parametrize("changes", [
    {"price": "-1"},
    {"price": "abc"},
    {"quantity": -3},
    {"quantity": True},
    {"name": ""},
])
def test_update_validates_values(products, market, changes):
    with pytest.raises(InvalidInputError):
        products.update_product(market.a1, changes)


def test_update_with_unknown_category(products, market):
    with pytest.raises(NotFoundError):
        products.update_product(market.a1, {"category_id": 42})


def test_create_product_with_duplicate_sku(products, market):
    payload = ProductCreate(sku="A-1", name="Copy", price=Decimal("1"), quantity=1, user_id=market.vendor_a_user_id)

    with pytest.raises(ConflictError):
        products.create_product(payload)


def test_categories(products, market):
    created = products.create_category(CategoryCreate(name="Dairy"))
    product = products.create_product(
        ProductCreate(sku="B-2", name="Butter", price=Decimal("9.90"), quantity=7,
                      user_id=market.vendor_b_user_id, category_id=created.id)
    )

    assert product.category_id == created.id
    assert [c.name for c in products.list_categories()] == ["Dairy"]

    with pytest.raises(ConflictError):
        products.create_category(CategoryCreate(name="Dairy"))
