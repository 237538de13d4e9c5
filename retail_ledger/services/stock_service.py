import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from retail_ledger.core.constants import (
    DIRECTION_IN,
    DIRECTION_OUT,
    DIRECTIONS,
    LEDGER_CASH,
    PAYMENT_METHODS,
    STOCK_PURCHASE,
    STOCK_RETURN,
    STOCK_SALE,
)
from retail_ledger.core.errors import InvalidDate, InvalidStockOperation, StateConflictError, ValidationError
from retail_ledger.core.money import to_money
from retail_ledger.core.pagination import normalize_page
from retail_ledger.database.session import unit_of_work
from retail_ledger.models.product import Product
from retail_ledger.models.stock_transaction import StockTransaction
from retail_ledger.services import daily_transaction_service as ledger
from retail_ledger.services.lookups import get_product, get_stock_transaction, product_purchase_date

logger = logging.getLogger(__name__)

# The only manual movements: buying stock pays the supplier, returning stock to
# the supplier is refunded at the buying price.
_CASH_FLOW_BY_MOVEMENT = {
    (STOCK_PURCHASE, DIRECTION_IN): DIRECTION_OUT,
    (STOCK_RETURN, DIRECTION_OUT): DIRECTION_IN,
}


def _validate_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("Stock quantity must be a whole number")
    if quantity <= 0:
        raise ValidationError("Stock quantity must be greater than 0")
    return quantity


def adjust_stock(product: Product, delta: int) -> int:
    """Apply ``delta`` units to the product, refusing to go below zero."""
    current = product.stock_quantity or 0
    new_quantity = current + delta
    if new_quantity < 0:
        raise InvalidStockOperation(
            "{} current stock is {}, cannot remove {} units".format(product.name, current, -delta)
        )
    product.stock_quantity = new_quantity
    return new_quantity


def ensure_not_before_purchase(db: Session, product: Product, when: date, label: str) -> None:
    purchase_date = product_purchase_date(db, product.id)
    if purchase_date is not None and when < purchase_date:
        raise InvalidDate(
            "{} cannot be before {} (product purchase date)".format(label, purchase_date.isoformat())
        )


def record_movement(
    db: Session,
    product: Product,
    *,
    quantity: int,
    direction: str,
    movement_type: str,
    movement_date: date,
    note: str | None = None,
    sale_id: int | None = None,
    initial: bool = False,
) -> StockTransaction:
    """Insert the stock row and move ``Product.stock_quantity`` in the same unit of work."""
    delta = quantity if direction == DIRECTION_IN else -quantity
    adjust_stock(product, delta)
    movement = StockTransaction(
        product_id=product.id,
        quantity=quantity,
        direction=direction,
        type=movement_type,
        date=movement_date,
        note=note,
        sale_id=sale_id,
        initial=initial,
    )
    db.add(movement)
    db.flush()
    return movement


def _movement_note(product: Product, movement_type: str, quantity: int, note: str | None) -> str:
    label = "Return to Supplier" if movement_type == STOCK_RETURN else movement_type.title()
    text = "{} # {} of {} units.".format(product.name, label, quantity)
    if note:
        text = "{} {}".format(text, note)
    return text


def apply_stock_movement(
    db: Session,
    product_id: int,
    *,
    quantity: int,
    direction: str,
    movement_type: str,
    movement_date: date,
    note: str | None = None,
    payment_method: str = LEDGER_CASH,
) -> StockTransaction:
    _validate_quantity(quantity)
    if direction not in DIRECTIONS:
        raise ValidationError("Direction must be one of {}".format(", ".join(DIRECTIONS)))
    if movement_type not in (STOCK_PURCHASE, STOCK_RETURN):
        raise ValidationError("Stock movements must be PURCHASE or RETURN; sales move stock themselves")
    if (movement_type, direction) not in _CASH_FLOW_BY_MOVEMENT:
        raise ValidationError("Purchases must come IN and supplier returns must go OUT")
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError("Payment method must be one of {}".format(", ".join(PAYMENT_METHODS)))

    with unit_of_work(db):
        product = get_product(db, product_id)
        ensure_not_before_purchase(db, product, movement_date, "Stock transaction date")

        movement = record_movement(
            db,
            product,
            quantity=quantity,
            direction=direction,
            movement_type=movement_type,
            movement_date=movement_date,
            note=_movement_note(product, movement_type, quantity, note),
        )

        ledger.record_entry(
            db,
            ledger_type=payment_method,
            direction=_CASH_FLOW_BY_MOVEMENT[(movement_type, direction)],
            amount=to_money(product.buying_price) * quantity,
            entry_date=movement_date,
            note=note or movement.note,
            stock_id=movement.id,
            product_id=product.id,
        )

    logger.info(
        "Stock %s %s x%s for product %s, on hand %s",
        movement_type,
        direction,
        quantity,
        product.id,
        product.stock_quantity,
    )
    return movement


def undo_stock_transaction(db: Session, movement: StockTransaction) -> Product:
    """Delete a movement together with its ledger row and reverse its effect on stock."""
    product = get_product(db, movement.product_id)
    delta = -movement.quantity if movement.direction == DIRECTION_IN else movement.quantity
    adjust_stock(product, delta)
    ledger.delete_linked_entries(db, stock_id=movement.id)
    db.delete(movement)
    db.flush()
    return product


def delete_stock_transaction(db: Session, stock_id: int) -> Product:
    with unit_of_work(db):
        movement = get_stock_transaction(db, stock_id)
        if movement.sale_id is not None or movement.type == STOCK_SALE:
            raise StateConflictError("Stock linked to a sale can only be removed by deleting or returning the sale")
        if movement.initial:
            raise StateConflictError("The founding purchase of a product cannot be deleted; delete the product instead")
        product = undo_stock_transaction(db, movement)

    logger.info("Deleted stock transaction %s, product %s on hand %s", stock_id, product.id, product.stock_quantity)
    return product


def list_stock_transactions(
    db: Session,
    *,
    product_id: int | None = None,
    movement_type: str | None = None,
    direction: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> dict:
    page, limit, offset = normalize_page(page, limit)
    filters = []
    if product_id is not None:
        filters.append(StockTransaction.product_id == product_id)
    if movement_type:
        filters.append(StockTransaction.type == movement_type)
    if direction:
        filters.append(StockTransaction.direction == direction)

    rows = db.execute(
        select(StockTransaction)
        .where(*filters)
        .order_by(StockTransaction.id.desc())
        .offset(offset)
        .limit(limit)
    ).scalars()
    total = db.execute(select(func.count(StockTransaction.id)).where(*filters)).scalar_one()
    return {"stock_transactions": list(rows), "total": total, "page": page, "limit": limit}
