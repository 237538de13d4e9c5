from sqlalchemy import Column, Date, ForeignKey, Index, Integer, Numeric, String

from retail_ledger.database.base import Base


class Installment(Base):
    __tablename__ = "installments"

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False)

    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    paid_date = Column(Date)
    status = Column(String(10), nullable=False)

    __table_args__ = (
        Index("idx_installments_sale_due", "sale_id", "due_date"),
    )


__all__ = ["Installment"]
