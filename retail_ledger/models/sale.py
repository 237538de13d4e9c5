from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Index, Integer, Numeric, String

from retail_ledger.database.base import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)

    sale_date = Column(Date, nullable=False)
    sale_type = Column(String(20), nullable=False)
    payment_method = Column(String(10), nullable=False)

    # Units still held by the customer; returned units move to return_quantity.
    quantity = Column(Integer, nullable=False)
    discount = Column(Numeric(12, 2), nullable=False, default=0)
    total_amount = Column(Numeric(12, 2), nullable=False)
    down_payment = Column(Numeric(12, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    remaining_amount = Column(Numeric(12, 2), nullable=False, default=0)

    per_installment = Column(Numeric(12, 2), nullable=False, default=0)
    total_installments = Column(Integer, nullable=False, default=0)
    paid_installments = Column(Integer, nullable=False, default=0)

    return_quantity = Column(Integer, nullable=False, default=0)
    return_amount = Column(Numeric(12, 2), nullable=False, default=0)

    status = Column(String(20), nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("idx_sales_sale_date", "sale_date"),
        Index("idx_sales_customer", "customer_id"),
        Index("idx_sales_product", "product_id"),
    )


__all__ = ["Sale"]
