from sqlalchemy import select
from sqlalchemy.orm import Session

from retail_ledger.core.errors import NotFoundError
from retail_ledger.models.customer import Customer
from retail_ledger.models.installment import Installment
from retail_ledger.models.product import Product
from retail_ledger.models.sale import Sale
from retail_ledger.models.stock_transaction import StockTransaction


def _get_or_raise(db: Session, model, entity_id, label: str):
    instance = db.get(model, entity_id)
    if instance is None:
        raise NotFoundError(label, entity_id)
    return instance


def get_product(db: Session, product_id: int) -> Product:
    return _get_or_raise(db, Product, product_id, "Product")


def get_customer(db: Session, customer_id: int) -> Customer:
    return _get_or_raise(db, Customer, customer_id, "Customer")


def get_sale(db: Session, sale_id: int) -> Sale:
    return _get_or_raise(db, Sale, sale_id, "Sale")


def get_installment(db: Session, installment_id: int) -> Installment:
    return _get_or_raise(db, Installment, installment_id, "Installment")


def get_stock_transaction(db: Session, stock_id: int) -> StockTransaction:
    return _get_or_raise(db, StockTransaction, stock_id, "Stock transaction")


def product_purchase_date(db: Session, product_id: int):
    """Date of the founding purchase of a product, or None for legacy rows."""
    return db.execute(
        select(StockTransaction.date)
        .where(
            StockTransaction.product_id == product_id,
            StockTransaction.initial.is_(True),
        )
        .order_by(StockTransaction.date)
        .limit(1)
    ).scalar_one_or_none()


def sale_installments(db: Session, sale_id: int) -> list[Installment]:
    rows = db.execute(
        select(Installment)
        .where(Installment.sale_id == sale_id)
        .order_by(Installment.due_date, Installment.id)
    ).scalars()
    return list(rows)
