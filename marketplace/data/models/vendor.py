from sqlalchemy import Column, Integer, ForeignKey, String

from marketplace.data.database import Base


class VendorModel(Base):
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True)
    # products are linked to a vendor through this user, not by a direct FK
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)

    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    email = Column(String, nullable=False, unique=True)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    postal_code = Column(String, nullable=True)
    tax_id = Column(String, nullable=False, unique=True)
