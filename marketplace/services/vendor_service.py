# marketplace/services/vendor_service.py
from sqlalchemy.orm import Session

from marketplace.data.models.vendor import VendorModel
from marketplace.domain.errors import ConflictError, NotFoundError
from marketplace.domain.schemas import VendorCreate, VendorRead
from marketplace.repos.user_repo import UserRepo
from marketplace.repos.vendor_repo import VendorRepo
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class VendorService:
    def __init__(self, db: Session):
        self.repo = VendorRepo(db)
        self.users = UserRepo(db)

    def create_vendor(self, payload: VendorCreate) -> VendorRead:
        if not self.users.get_user(payload.user_id):
            raise NotFoundError("user")

        conflict = self.repo.find_conflicts(payload.tax_id, payload.email, payload.user_id)
        if conflict:
            if conflict.tax_id == payload.tax_id:
                raise ConflictError("Tax id already registered")
            if conflict.email == payload.email:
                raise ConflictError("Email already registered")
            raise ConflictError("User already has a vendor profile")

        vendor = self.repo.create_vendor(VendorModel(**payload.model_dump()))
        logger.info(f"Vendor {vendor.id} registered for user {vendor.user_id}")
        return VendorRead.model_validate(vendor)

    def get_vendor(self, vendor_id: int) -> VendorRead:
        vendor = self.repo.get_vendor(vendor_id)
        if not vendor:
            raise NotFoundError("vendor")
        return VendorRead.model_validate(vendor)

    def get_vendor_by_user(self, user_id: int) -> VendorRead:
        vendor = self.repo.get_vendor_by_user(user_id)
        if not vendor:
            raise NotFoundError("vendor", "Vendor not found for this user")
        return VendorRead.model_validate(vendor)
