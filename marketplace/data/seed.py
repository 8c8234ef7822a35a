# marketplace/data/seed.py
from decimal import Decimal

from marketplace.data.database import SessionLocal, init_db
from marketplace.data.models import CategoryModel, ProductModel, UserModel, VendorModel
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

VENDORS = [
    {
        "user": "Green Farm",
        "email": "sales@greenfarm.example",
        "tax_id": "11.111.111/0001-11",
        "products": [
            ("GF-TOM-1KG", "Tomatoes 1kg", "6.90", 120),
            ("GF-LET-UN", "Lettuce", "3.50", 80),
        ],
    },
    {
        "user": "Hill Dairy",
        "email": "orders@hilldairy.example",
        "tax_id": "22.222.222/0001-22",
        "products": [
            ("HD-MLK-1L", "Whole milk 1L", "5.20", 200),
            ("HD-CHS-500", "Cheese 500g", "24.00", 40),
        ],
    },
]


def seed(session_factory=SessionLocal):
    db = session_factory()
    try:
        # not forcing: only seed if empty
        if db.query(VendorModel).first():
            return

        category = CategoryModel(name="Groceries")
        db.add(category)
        db.add(UserModel(name="Demo Buyer", email="buyer@example.com"))

        for entry in VENDORS:
            user = UserModel(name=entry["user"], email=entry["email"])
            db.add(user)
            db.flush()

            db.add(VendorModel(user_id=user.id, name=entry["user"], email=entry["email"], tax_id=entry["tax_id"]))
            for sku, name, price, stock in entry["products"]:
                db.add(
                    ProductModel(
                        sku=sku,
                        name=name,
                        price=Decimal(price),
                        quantity=stock,
                        user_id=user.id,
                        category_id=category.id,
                    )
                )
            db.flush()

        db.commit()
        logger.info(f"Seeded {len(VENDORS)} vendors")
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
    seed()
