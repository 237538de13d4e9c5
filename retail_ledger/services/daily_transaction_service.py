import logging
from datetime import date

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from retail_ledger.core.constants import (
    DIRECTION_OUT,
    DIRECTIONS,
    LEDGER_OUTFLOW_TYPES,
    LEDGER_TYPES,
)
from retail_ledger.core.errors import NotFoundError, StateConflictError, ValidationError
from retail_ledger.core.money import to_money
from retail_ledger.core.pagination import normalize_page
from retail_ledger.database.session import unit_of_work
from retail_ledger.models.daily_transaction import DailyTransaction

logger = logging.getLogger(__name__)

_LINK_FIELDS = ("sale_id", "product_id", "stock_id", "installment_id", "investment_id")


def resolve_direction(ledger_type: str, direction: str | None) -> str:
    if ledger_type in LEDGER_OUTFLOW_TYPES:
        return DIRECTION_OUT
    if direction not in DIRECTIONS:
        raise ValidationError("Direction must be one of {}".format(", ".join(DIRECTIONS)))
    return direction


def record_entry(
    db: Session,
    *,
    ledger_type: str,
    direction: str,
    amount,
    entry_date: date,
    note: str | None = None,
    **links,
) -> DailyTransaction:
    """Append one cash-book row. Callers own the surrounding unit of work."""
    unknown = set(links) - set(_LINK_FIELDS)
    if unknown:
        raise ValueError("Unknown ledger links: {}".format(", ".join(sorted(unknown))))
    entry = DailyTransaction(
        type=ledger_type,
        direction=direction,
        amount=to_money(amount),
        date=entry_date,
        note=note,
        **links,
    )
    db.add(entry)
    db.flush()
    return entry


def linked_entries(db: Session, **link) -> list[DailyTransaction]:
    stmt = select(DailyTransaction)
    for field, value in link.items():
        stmt = stmt.where(getattr(DailyTransaction, field) == value)
    return list(db.execute(stmt.order_by(DailyTransaction.id)).scalars())


def delete_linked_entries(db: Session, *, direction: str | None = None, **link) -> int:
    if not link:
        raise ValueError("delete_linked_entries needs at least one link")
    stmt = delete(DailyTransaction)
    for field, value in link.items():
        stmt = stmt.where(getattr(DailyTransaction, field) == value)
    if direction is not None:
        stmt = stmt.where(DailyTransaction.direction == direction)
    result = db.execute(stmt)
    return result.rowcount or 0


def _validate_manual_entry(ledger_type: str, amount) -> None:
    if ledger_type not in LEDGER_TYPES:
        raise ValidationError("Type must be one of {}".format(", ".join(LEDGER_TYPES)))
    if to_money(amount) <= 0:
        raise ValidationError("Amount must be greater than 0")


def _get_manual_entry(db: Session, entry_id: int, action: str) -> DailyTransaction:
    entry = db.get(DailyTransaction, entry_id)
    if entry is None:
        raise NotFoundError("Daily transaction", entry_id)
    if entry.is_linked:
        raise StateConflictError(
            "Cannot {} a payment transaction linked to a product, stock, installment, "
            "investment or sale".format(action)
        )
    return entry


def create_daily_transaction(
    db: Session,
    *,
    ledger_type: str,
    amount,
    entry_date: date,
    direction: str | None = None,
    note: str | None = None,
) -> DailyTransaction:
    _validate_manual_entry(ledger_type, amount)
    with unit_of_work(db):
        entry = record_entry(
            db,
            ledger_type=ledger_type,
            direction=resolve_direction(ledger_type, direction),
            amount=amount,
            entry_date=entry_date,
            note=note or "-",
        )
    logger.info("Recorded %s %s of %s on %s", entry.type, entry.direction, entry.amount, entry.date)
    return entry


def update_daily_transaction(db: Session, entry_id: int, **changes) -> DailyTransaction:
    with unit_of_work(db):
        entry = _get_manual_entry(db, entry_id, "update")
        ledger_type = changes.get("ledger_type") or entry.type
        amount = changes.get("amount") if changes.get("amount") is not None else entry.amount
        _validate_manual_entry(ledger_type, amount)

        entry.type = ledger_type
        entry.direction = resolve_direction(ledger_type, changes.get("direction") or entry.direction)
        entry.amount = to_money(amount)
        if changes.get("entry_date") is not None:
            entry.date = changes["entry_date"]
        if changes.get("note") is not None:
            entry.note = changes["note"]
    return entry


def delete_daily_transaction(db: Session, entry_id: int) -> DailyTransaction:
    with unit_of_work(db):
        entry = _get_manual_entry(db, entry_id, "delete")
        db.delete(entry)
    logger.info("Deleted daily transaction %s", entry_id)
    return entry


def list_daily_transactions(
    db: Session,
    *,
    ledger_type: str | None = None,
    direction: str | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
    page: int = 1,
    limit: int | None = None,
) -> dict:
    page, limit, offset = normalize_page(page, limit)
    filters = []
    if ledger_type:
        filters.append(DailyTransaction.type == ledger_type)
    if direction:
        filters.append(DailyTransaction.direction == direction)
    if start_date:
        filters.append(DailyTransaction.date >= start_date)
    if end_date:
        filters.append(DailyTransaction.date <= end_date)

    rows = db.execute(
        select(DailyTransaction)
        .where(*filters)
        .order_by(DailyTransaction.id.desc())
        .offset(offset)
        .limit(limit)
    ).scalars()
    total = db.execute(select(func.count(DailyTransaction.id)).where(*filters)).scalar_one()
    return {"daily_transactions": list(rows), "total": total, "page": page, "limit": limit}
