import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from retail_ledger.core.constants import (
    DIRECTION_IN,
    DIRECTION_OUT,
    LEDGER_CASH,
    PAYMENT_METHODS,
    SALE_ACTIVE,
    SALE_COMPLETED,
    STOCK_PURCHASE,
    STOCK_RETURN,
)
from retail_ledger.core.errors import StateConflictError, ValidationError
from retail_ledger.core.money import ZERO, to_money
from retail_ledger.core.pagination import normalize_page
from retail_ledger.database.session import unit_of_work
from retail_ledger.models.product import Product
from retail_ledger.models.sale import Sale
from retail_ledger.models.stock_transaction import StockTransaction
from retail_ledger.services import daily_transaction_service as ledger
from retail_ledger.services.lookups import get_product
from retail_ledger.services.stock_service import record_movement

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("name", "category", "brand", "buying_price", "selling_price")


def _validate_prices(buying_price, selling_price) -> None:
    if to_money(buying_price) < 0 or to_money(selling_price) < 0:
        raise ValidationError("Prices must be greater than or equal to 0")
    if to_money(buying_price) >= to_money(selling_price):
        raise ValidationError("Buying price must be less than selling price")


def _normalize_name(name: str) -> str:
    name = (name or "").strip().lower()
    if len(name) < 2:
        raise ValidationError("Name must be at least 2 characters")
    return name


def create_product(
    db: Session,
    *,
    name: str,
    buying_price,
    selling_price,
    stock_quantity: int,
    purchase_date: date,
    category: str = "",
    brand: str = "",
    note: str | None = None,
    payment_method: str = LEDGER_CASH,
) -> Product:
    """
    Register a product together with its founding purchase.

    The initial stock is recorded as an ``initial`` PURCHASE movement and the
    money paid for it as one outgoing cash-book row linked to that movement.
    """
    _validate_prices(buying_price, selling_price)
    if isinstance(stock_quantity, bool) or not isinstance(stock_quantity, int) or stock_quantity <= 0:
        raise ValidationError("Initial stock must be a whole number starting from 1")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError("Payment method must be one of {}".format(", ".join(PAYMENT_METHODS)))

    with unit_of_work(db):
        product = Product(
            name=_normalize_name(name),
            category=category or "",
            brand=brand or "",
            buying_price=to_money(buying_price),
            selling_price=to_money(selling_price),
            stock_quantity=0,
        )
        db.add(product)
        db.flush()

        movement = record_movement(
            db,
            product,
            quantity=stock_quantity,
            direction=DIRECTION_IN,
            movement_type=STOCK_PURCHASE,
            movement_date=purchase_date,
            note=note or None,
            initial=True,
        )
        total_cost = to_money(buying_price) * stock_quantity
        if total_cost > 0:
            ledger.record_entry(
                db,
                ledger_type=payment_method,
                direction=DIRECTION_OUT,
                amount=total_cost,
                entry_date=purchase_date,
                note=note or "Initial purchase of {} units of {}".format(stock_quantity, product.name),
                stock_id=movement.id,
                product_id=product.id,
            )

    logger.info("Registered product %s (%s) with %s units", product.id, product.name, stock_quantity)
    return product


def update_product(db: Session, product_id: int, **changes) -> Product:
    with unit_of_work(db):
        product = get_product(db, product_id)
        buying_price = changes.get("buying_price", product.buying_price)
        selling_price = changes.get("selling_price", product.selling_price)
        if buying_price is None:
            buying_price = product.buying_price
        if selling_price is None:
            selling_price = product.selling_price
        _validate_prices(buying_price, selling_price)

        for field in _EDITABLE_FIELDS:
            value = changes.get(field)
            if value is None:
                continue
            if field == "name":
                value = _normalize_name(value)
            elif field in ("buying_price", "selling_price"):
                value = to_money(value)
            setattr(product, field, value)
    return product


def delete_product(db: Session, product_id: int) -> Product:
    with unit_of_work(db):
        product = get_product(db, product_id)
        has_sales = db.execute(
            select(Sale.id).where(Sale.product_id == product_id).limit(1)
        ).first()
        if has_sales:
            raise StateConflictError("Cannot delete a product that has sales; delete the sales first")

        movements = db.execute(
            select(StockTransaction).where(StockTransaction.product_id == product_id)
        ).scalars().all()
        for movement in movements:
            ledger.delete_linked_entries(db, stock_id=movement.id)
            db.delete(movement)
        ledger.delete_linked_entries(db, product_id=product_id)
        db.flush()
        db.delete(product)

    logger.info("Deleted product %s and %s stock movements", product_id, len(movements))
    return product


def list_products(
    db: Session,
    *,
    name: str | None = None,
    category: str | None = None,
    brand: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> dict:
    page, limit, offset = normalize_page(page, limit)
    filters = []
    if name:
        filters.append(Product.name.contains(name.strip().lower()))
    if category:
        filters.append(Product.category.contains(category.strip()))
    if brand:
        filters.append(Product.brand.contains(brand.strip()))

    purchase_dates = (
        select(StockTransaction.product_id, func.min(StockTransaction.date).label("purchase_date"))
        .where(StockTransaction.initial.is_(True))
        .group_by(StockTransaction.product_id)
        .subquery()
    )
    rows = db.execute(
        select(Product, purchase_dates.c.purchase_date)
        .outerjoin(purchase_dates, purchase_dates.c.product_id == Product.id)
        .where(*filters)
        .order_by(Product.id)
        .offset(offset)
        .limit(limit)
    ).all()
    total = db.execute(select(func.count(Product.id)).where(*filters)).scalar_one()

    products = []
    for product, purchase_date in rows:
        products.append(
            {
                "product": product,
                "purchase_date": purchase_date or product.created_at.date(),
            }
        )
    return {"products": products, "total": total, "page": page, "limit": limit}


def get_product_details(db: Session, product_id: int) -> dict:
    product = get_product(db, product_id)
    movements = db.execute(
        select(StockTransaction).where(StockTransaction.product_id == product_id)
    ).scalars().all()
    sales = db.execute(select(Sale).where(Sale.product_id == product_id)).scalars().all()

    purchased_qty = sum(m.quantity for m in movements if m.type == STOCK_PURCHASE)
    customer_returns = sum(
        m.quantity for m in movements if m.type == STOCK_RETURN and m.direction == DIRECTION_IN
    )
    supplier_returns = sum(
        m.quantity for m in movements if m.type == STOCK_RETURN and m.direction == DIRECTION_OUT
    )
    buying_price = to_money(product.buying_price)
    selling_price = to_money(product.selling_price)

    return {
        "overview": {
            "id": product.id,
            "name": product.name,
            "category": product.category,
            "brand": product.brand,
            "buying_price": buying_price,
            "selling_price": selling_price,
            "stock_quantity": product.stock_quantity,
            "created_at": product.created_at,
        },
        "inventory": {
            "total_purchased_qty": purchased_qty,
            "total_purchase_cost": buying_price * purchased_qty,
            "customer_returns": customer_returns,
            "supplier_returns": supplier_returns,
            "expected_stock_value": selling_price * product.stock_quantity,
        },
        "sales": {
            "total_sales": len(sales),
            "total_sold_qty": sum(s.quantity for s in sales),
            "total_revenue": sum((to_money(s.total_amount) for s in sales), ZERO),
            "total_discount": sum((to_money(s.discount) for s in sales), ZERO),
            "completed_sales": sum(1 for s in sales if s.status == SALE_COMPLETED),
            "active_sales": sum(1 for s in sales if s.status == SALE_ACTIVE),
        },
    }
