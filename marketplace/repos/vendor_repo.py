# marketplace/repos/vendor_repo.py
from sqlalchemy import select, or_
from sqlalchemy.orm import Session

from marketplace.data.models.buyer import BuyerModel
from marketplace.data.models.vendor import VendorModel


class VendorRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_vendor(self, vendor_id: int) -> VendorModel | None:
        return self.db.get(VendorModel, vendor_id)

    def get_vendor_by_user(self, user_id: int) -> VendorModel | None:
        return self.db.execute(
            select(VendorModel).where(VendorModel.user_id == user_id)
        ).scalar_one_or_none()

    def find_conflicts(self, tax_id: str, email: str, user_id: int) -> VendorModel | None:
        """One query for any vendor already using this tax id, email or user."""
        return self.db.execute(
            select(VendorModel).where(
                or_(
                    VendorModel.tax_id == tax_id,
                    VendorModel.email == email,
                    VendorModel.user_id == user_id,
                )
            )
        ).scalars().first()

    def create_vendor(self, vendor: VendorModel) -> VendorModel:
        self.db.add(vendor)
        self.db.commit()
        self.db.refresh(vendor)
        return vendor

    def get_buyer(self, buyer_id: int) -> BuyerModel | None:
        return self.db.get(BuyerModel, buyer_id)
