import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SUMMARY_BATCH_ENABLED", "false")

from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from retail_ledger.database.base import Base
from retail_ledger.database.engine import build_engine
from retail_ledger.models import import_all_models
from retail_ledger.models.daily_transaction import DailyTransaction
from retail_ledger.services.customer_service import create_customer
from retail_ledger.services.product_service import create_product

PURCHASE_DATE = date(2024, 1, 10)
SALE_DATE = date(2024, 2, 1)


def make_session_factory():
    import_all_models()
    engine = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(bind=engine)
    return engine, sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


def seed_product(db, *, stock_quantity=10, buying_price="100", selling_price="150", name="Ceiling Fan"):
    return create_product(
        db,
        name=name,
        category="fans",
        brand="pak",
        buying_price=Decimal(buying_price),
        selling_price=Decimal(selling_price),
        stock_quantity=stock_quantity,
        purchase_date=PURCHASE_DATE,
    )


def seed_customer(db, *, cnic="3520212345671", name="Ali Raza"):
    return create_customer(
        db,
        name=name,
        cnic=cnic,
        phone="03001234567",
        address="Model Town, Lahore",
    )


def ledger_rows(db, **link):
    stmt = select(DailyTransaction)
    for field, value in link.items():
        stmt = stmt.where(getattr(DailyTransaction, field) == value)
    return list(db.execute(stmt.order_by(DailyTransaction.id)).scalars())


def count_rows(db, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()
