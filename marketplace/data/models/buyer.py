from sqlalchemy import Column, Integer, ForeignKey, String

from marketplace.data.database import Base


class BuyerModel(Base):
    __tablename__ = "buyers"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    address = Column(String, nullable=True)
