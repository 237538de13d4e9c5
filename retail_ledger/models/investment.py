from sqlalchemy import Column, Date, Integer, Numeric, String

from retail_ledger.database.base import Base


class Investment(Base):
    __tablename__ = "investments"

    id = Column(Integer, primary_key=True)
    investor = Column(String, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    method = Column(String(10), nullable=False, default="CASH")
    note = Column(String, nullable=False, default="")


__all__ = ["Investment"]
