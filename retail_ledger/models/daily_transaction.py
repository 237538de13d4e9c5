from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String

from retail_ledger.database.base import Base


class DailyTransaction(Base):
    __tablename__ = "daily_transactions"

    id = Column(Integer, primary_key=True)
    type = Column(String(10), nullable=False)
    direction = Column(String(3), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=False)
    note = Column(String)

    sale_id = Column(Integer, ForeignKey("sales.id"))
    product_id = Column(Integer, ForeignKey("products.id"))
    stock_id = Column(Integer, ForeignKey("stock_transactions.id"))
    installment_id = Column(Integer, ForeignKey("installments.id"))
    investment_id = Column(Integer, ForeignKey("investments.id"))

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_daily_transactions_date", "date"),
        Index("idx_daily_transactions_sale", "sale_id"),
        Index("idx_daily_transactions_stock", "stock_id"),
        Index("idx_daily_transactions_installment", "installment_id"),
    )

    @property
    def is_linked(self) -> bool:
        return any(
            value is not None
            for value in (
                self.sale_id,
                self.product_id,
                self.stock_id,
                self.installment_id,
                self.investment_id,
            )
        )


__all__ = ["DailyTransaction"]
