from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Index, Integer, String

from retail_ledger.database.base import Base


class StockTransaction(Base):
    __tablename__ = "stock_transactions"

    id = Column(Integer, primary_key=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    sale_id = Column(Integer, ForeignKey("sales.id"))

    quantity = Column(Integer, nullable=False)
    direction = Column(String(3), nullable=False)
    type = Column(String(10), nullable=False)
    date = Column(Date, nullable=False)
    note = Column(String)
    initial = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_stock_transactions_quantity_positive"),
        Index("idx_stock_transactions_product", "product_id"),
        Index("idx_stock_transactions_type_date", "type", "date"),
        Index("idx_stock_transactions_sale", "sale_id"),
    )


__all__ = ["StockTransaction"]
