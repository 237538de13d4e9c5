from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, Numeric, UniqueConstraint

from retail_ledger.database.base import Base


class MonthlySummary(Base):
    __tablename__ = "monthly_summaries"

    id = Column(Integer, primary_key=True)
    year = Column(Integer, nullable=False)
    month = Column(Integer, nullable=False)

    total_expense = Column(Numeric(14, 2), nullable=False, default=0)
    total_debt = Column(Numeric(14, 2), nullable=False, default=0)
    total_bank = Column(Numeric(14, 2), nullable=False, default=0)
    total_cash = Column(Numeric(14, 2), nullable=False, default=0)
    total_sales = Column(Numeric(14, 2), nullable=False, default=0)
    cost_of_stock = Column(Numeric(14, 2), nullable=False, default=0)
    gross_profit = Column(Numeric(14, 2), nullable=False, default=0)
    net_profit = Column(Numeric(14, 2), nullable=False, default=0)
    stock_value = Column(Numeric(14, 2), nullable=False, default=0)
    total_investment = Column(Numeric(14, 2), nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("year", "month", name="uq_monthly_summaries_year_month"),
    )


__all__ = ["MonthlySummary"]
