import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from retail_ledger.core.constants import (
    DIRECTION_IN,
    DIRECTION_OUT,
    LEDGER_BANK,
    LEDGER_CASH,
    LEDGER_DEBT,
    LEDGER_EXPENSE,
    STOCK_SALE,
)
from retail_ledger.core.dates import iter_months, month_bounds
from retail_ledger.core.errors import NotFoundError, ValidationError
from retail_ledger.core.money import ZERO, to_money
from retail_ledger.core.pagination import normalize_page
from retail_ledger.database.session import unit_of_work
from retail_ledger.models.customer import Customer
from retail_ledger.models.daily_transaction import DailyTransaction
from retail_ledger.models.investment import Investment
from retail_ledger.models.monthly_summary import MonthlySummary
from retail_ledger.models.product import Product
from retail_ledger.models.sale import Sale
from retail_ledger.models.stock_transaction import StockTransaction

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = (
    "total_expense",
    "total_debt",
    "total_bank",
    "total_cash",
    "total_sales",
    "cost_of_stock",
    "gross_profit",
    "net_profit",
    "stock_value",
    "total_investment",
)
FLOW_FIELDS = tuple(field for field in SUMMARY_FIELDS if field != "stock_value")


def _validate_month(month: int, year: int) -> None:
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError("Month must be between 1 and 12")
    if not isinstance(year, int) or year < 1:
        raise ValidationError("Year must be a positive number")


def compute_month(db: Session, month: int, year: int) -> dict:
    """
    Aggregate one calendar month straight from the raw ledgers.

    Cash and bank totals are signed net changes within the month, not
    balances. ``stock_value`` is read from current stock levels.
    """
    start, end = month_bounds(month, year)
    totals = {field: ZERO for field in SUMMARY_FIELDS}

    entries = db.execute(
        select(DailyTransaction.type, DailyTransaction.direction, DailyTransaction.amount)
        .where(DailyTransaction.date >= start, DailyTransaction.date <= end)
    ).all()
    for ledger_type, direction, amount in entries:
        amount = to_money(amount)
        signed = amount if direction == DIRECTION_IN else -amount
        if ledger_type == LEDGER_EXPENSE and direction == DIRECTION_OUT:
            totals["total_expense"] += amount
        elif ledger_type == LEDGER_DEBT and direction == DIRECTION_OUT:
            totals["total_debt"] += amount
        elif ledger_type == LEDGER_BANK:
            totals["total_bank"] += signed
        elif ledger_type == LEDGER_CASH:
            totals["total_cash"] += signed

    sale_amounts = db.execute(
        select(Sale.total_amount).where(Sale.sale_date >= start, Sale.sale_date <= end)
    ).scalars()
    totals["total_sales"] = sum((to_money(amount) for amount in sale_amounts), ZERO)

    sold = db.execute(
        select(StockTransaction.quantity, Product.buying_price)
        .join(Product, Product.id == StockTransaction.product_id)
        .where(
            StockTransaction.type == STOCK_SALE,
            StockTransaction.date >= start,
            StockTransaction.date <= end,
        )
    ).all()
    totals["cost_of_stock"] = sum((to_money(price) * quantity for quantity, price in sold), ZERO)

    totals["gross_profit"] = totals["total_sales"] - totals["cost_of_stock"]
    totals["net_profit"] = totals["gross_profit"] - totals["total_expense"] - totals["total_debt"]

    on_hand = db.execute(select(Product.stock_quantity, Product.buying_price)).all()
    totals["stock_value"] = sum((to_money(price) * quantity for quantity, price in on_hand), ZERO)

    investments = db.execute(
        select(Investment.amount).where(Investment.date >= start, Investment.date <= end)
    ).scalars()
    totals["total_investment"] = sum((to_money(amount) for amount in investments), ZERO)

    return {field: to_money(value) for field, value in totals.items()}


def _upsert_summary(db: Session, month: int, year: int, totals: dict) -> tuple[MonthlySummary, bool]:
    summary = db.execute(
        select(MonthlySummary).where(MonthlySummary.year == year, MonthlySummary.month == month)
    ).scalar_one_or_none()
    created = summary is None
    if created:
        summary = MonthlySummary(year=year, month=month)
        db.add(summary)
    for field, value in totals.items():
        setattr(summary, field, value)
    db.flush()
    return summary, created


def recompute_month(db: Session, month: int, year: int) -> MonthlySummary:
    """Rebuild and store the summary for ``(year, month)``; safe to repeat."""
    _validate_month(month, year)
    with unit_of_work(db):
        summary, created = _upsert_summary(db, month, year, compute_month(db, month, year))
    logger.info(
        "Monthly summary %04d-%02d %s",
        year,
        month,
        "created" if created else "updated",
        extra={"summary_key": "{:04d}-{:02d}".format(year, month)},
    )
    return summary


def aggregate_range(
    db: Session,
    start_month: int,
    start_year: int,
    end_month: int | None = None,
    end_year: int | None = None,
) -> dict:
    """
    Recompute every month between the two bounds and fold them together.

    Flow fields are summed; ``stock_value`` is a snapshot and is taken from
    the last month instead.
    """
    _validate_month(start_month, start_year)
    if end_month is None or end_year is None:
        end_month, end_year = start_month, start_year
    _validate_month(end_month, end_year)

    months = list(iter_months(start_month, start_year, end_month, end_year))
    summaries = []
    with unit_of_work(db):
        for month, year in months:
            summary, _ = _upsert_summary(db, month, year, compute_month(db, month, year))
            summaries.append(summary)

        first_start, _ = month_bounds(*months[0])
        _, last_end = month_bounds(*months[-1])
        receivable = db.execute(
            select(Sale.remaining_amount).where(Sale.sale_date >= first_start, Sale.sale_date <= last_end)
        ).scalars()
        total_customer_debt = sum((to_money(amount) for amount in receivable), ZERO)
        total_stock_quantity = db.execute(select(func.coalesce(func.sum(Product.stock_quantity), 0))).scalar_one()
        total_customers = db.execute(select(func.count(Customer.id))).scalar_one()

    aggregated = {field: ZERO for field in FLOW_FIELDS}
    for summary in summaries:
        for field in FLOW_FIELDS:
            aggregated[field] += to_money(getattr(summary, field))
    aggregated["stock_value"] = to_money(summaries[-1].stock_value)

    aggregated.update(
        {
            "trend_data": [
                {
                    "month": summary.month,
                    "year": summary.year,
                    "gross_profit": to_money(summary.gross_profit),
                    "net_profit": to_money(summary.net_profit),
                    "total_sales": to_money(summary.total_sales),
                }
                for summary in summaries
            ],
            "total_customer_debt": total_customer_debt,
            "total_stock_quantity": int(total_stock_quantity or 0),
            "total_customers": total_customers,
            "months": len(summaries),
            "from": {"month": summaries[0].month, "year": summaries[0].year},
            "to": {"month": summaries[-1].month, "year": summaries[-1].year},
        }
    )
    return aggregated


def list_summaries(
    db: Session,
    *,
    year: int | None = None,
    month: int | None = None,
    page: int = 1,
    limit: int | None = None,
) -> dict:
    page, limit, offset = normalize_page(page, limit)
    filters = []
    if year is not None:
        filters.append(MonthlySummary.year == year)
    if month is not None:
        filters.append(MonthlySummary.month == month)
    rows = db.execute(
        select(MonthlySummary)
        .where(*filters)
        .order_by(MonthlySummary.year.desc(), MonthlySummary.month.desc())
        .offset(offset)
        .limit(limit)
    ).scalars()
    total = db.execute(select(func.count(MonthlySummary.id)).where(*filters)).scalar_one()
    return {"monthly_summaries": list(rows), "total": total, "page": page, "limit": limit}


def delete_summary(db: Session, summary_id: int) -> MonthlySummary:
    with unit_of_work(db):
        summary = db.get(MonthlySummary, summary_id)
        if summary is None:
            raise NotFoundError("Monthly summary", summary_id)
        db.delete(summary)
    logger.info("Deleted monthly summary %04d-%02d", summary.year, summary.month)
    return summary
