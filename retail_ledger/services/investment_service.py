import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from retail_ledger.core.constants import DIRECTION_IN, PAYMENT_METHODS
from retail_ledger.core.dates import month_bounds
from retail_ledger.core.errors import NotFoundError, ValidationError
from retail_ledger.core.money import to_money
from retail_ledger.core.pagination import normalize_page
from retail_ledger.database.session import unit_of_work
from retail_ledger.models.investment import Investment
from retail_ledger.services import daily_transaction_service as ledger

logger = logging.getLogger(__name__)


def _validate(investor, amount, method) -> None:
    if investor is not None and not investor.strip():
        raise ValidationError("Investor name is required")
    if amount is not None and to_money(amount) <= 0:
        raise ValidationError("Amount must be greater than 0")
    if method is not None and method not in PAYMENT_METHODS:
        raise ValidationError("Method must be one of {}".format(", ".join(PAYMENT_METHODS)))


def _investment_note(investment: Investment) -> str:
    return "Investment by {}{}".format(
        investment.investor, " - {}".format(investment.note) if investment.note else ""
    )


def get_investment(db: Session, investment_id: int) -> Investment:
    investment = db.get(Investment, investment_id)
    if investment is None:
        raise NotFoundError("Investment", investment_id)
    return investment


def create_investment(
    db: Session,
    *,
    investor: str,
    amount,
    investment_date: date,
    note: str | None = None,
    method: str = "CASH",
) -> Investment:
    _validate(investor, amount, method)
    with unit_of_work(db):
        investment = Investment(
            investor=investor.strip(),
            amount=to_money(amount),
            date=investment_date,
            method=method,
            note=note or "",
        )
        db.add(investment)
        db.flush()
        ledger.record_entry(
            db,
            ledger_type=method,
            direction=DIRECTION_IN,
            amount=investment.amount,
            entry_date=investment.date,
            note=_investment_note(investment),
            investment_id=investment.id,
        )
    logger.info("Recorded investment %s of %s by %s", investment.id, investment.amount, investment.investor)
    return investment


def update_investment(db: Session, investment_id: int, **changes) -> Investment:
    """Apply ``changes`` and rewrite the linked cash-book row to match."""
    _validate(changes.get("investor"), changes.get("amount"), changes.get("method"))
    with unit_of_work(db):
        investment = get_investment(db, investment_id)
        if changes.get("investor") is not None:
            investment.investor = changes["investor"].strip()
        if changes.get("amount") is not None:
            investment.amount = to_money(changes["amount"])
        if changes.get("investment_date") is not None:
            investment.date = changes["investment_date"]
        if changes.get("method") is not None:
            investment.method = changes["method"]
        if changes.get("note") is not None:
            investment.note = changes["note"]

        entries = ledger.linked_entries(db, investment_id=investment.id)
        if not entries:
            ledger.record_entry(
                db,
                ledger_type=investment.method,
                direction=DIRECTION_IN,
                amount=investment.amount,
                entry_date=investment.date,
                note=_investment_note(investment),
                investment_id=investment.id,
            )
        for entry in entries:
            entry.type = investment.method
            entry.amount = investment.amount
            entry.date = investment.date
            entry.note = _investment_note(investment)
    logger.info("Updated investment %s", investment.id)
    return investment


def delete_investment(db: Session, investment_id: int) -> Investment:
    with unit_of_work(db):
        investment = get_investment(db, investment_id)
        ledger.delete_linked_entries(db, investment_id=investment.id)
        db.delete(investment)
    logger.info("Deleted investment %s", investment_id)
    return investment


def list_investments(
    db: Session,
    *,
    month: int | None = None,
    year: int | None = None,
    page: int = 1,
    limit: int | None = None,
) -> dict:
    page, limit, offset = normalize_page(page, limit)
    filters = []
    if month is not None and year is not None:
        if not 1 <= month <= 12:
            raise ValidationError("Month must be between 1 and 12")
        start, end = month_bounds(month, year)
        filters.extend([Investment.date >= start, Investment.date <= end])
    elif year is not None:
        filters.extend([Investment.date >= date(year, 1, 1), Investment.date <= date(year, 12, 31)])

    rows = db.execute(
        select(Investment).where(*filters).order_by(Investment.date.desc(), Investment.id.desc()).offset(offset).limit(limit)
    ).scalars()
    total = db.execute(select(func.count(Investment.id)).where(*filters)).scalar_one()
    total_amount = db.execute(select(func.coalesce(func.sum(Investment.amount), 0)).where(*filters)).scalar_one()
    return {
        "investments": list(rows),
        "total": total,
        "total_amount": to_money(total_amount),
        "page": page,
        "limit": limit,
    }
