from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from retail_ledger.database.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    cnic = Column(String(13), nullable=False, unique=True)
    phone = Column(String(11), nullable=False)
    address = Column(String, nullable=False)
    email = Column(String)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))


__all__ = ["Customer"]
