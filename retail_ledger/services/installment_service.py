import logging
from datetime import date

from sqlalchemy import update
from sqlalchemy.orm import Session

from retail_ledger.config import get_settings
from retail_ledger.core.clock import system_clock
from retail_ledger.core.constants import (
    DIRECTION_IN,
    INSTALLMENT_LATE,
    INSTALLMENT_PAID,
    INSTALLMENT_PENDING,
    INSTALLMENT_UNPAID_STATUSES,
    LEDGER_CASH,
    PAYMENT_METHODS,
    SALE_CLOSED_STATUSES,
    SALE_RETURNED,
)
from retail_ledger.core.errors import InvalidDate, StateConflictError, ValidationError
from retail_ledger.core.money import ZERO, split_evenly, to_money
from retail_ledger.core.sale_rules import close_schedule, derive_status, settle
from retail_ledger.database.session import unit_of_work
from retail_ledger.models.installment import Installment
from retail_ledger.models.sale import Sale
from retail_ledger.services import daily_transaction_service as ledger
from retail_ledger.services.lookups import get_installment, get_sale, sale_installments

logger = logging.getLogger(__name__)


def _validate_paid_date(sale: Sale, paid_date: date, today: date) -> None:
    if paid_date < sale.sale_date:
        raise InvalidDate("Paid date cannot be before {} sale date".format(sale.sale_date.isoformat()))
    if paid_date > today:
        raise InvalidDate("Paid date cannot be in the future.")


def _validate_amount(amount) -> None:
    if amount is not None and to_money(amount) <= 0:
        raise ValidationError("Amount must be greater than 0")


def _is_closure(installment: Installment) -> bool:
    # Rows zeroed when the sale completed early carry no money of their own.
    return installment.status == INSTALLMENT_PAID and to_money(installment.amount) == ZERO


def _count_payments(installments) -> int:
    return sum(
        1 for i in installments if i.status == INSTALLMENT_PAID and to_money(i.amount) > 0
    )


def _mark_late(installments, today: date) -> int:
    marked = 0
    for installment in installments:
        if installment.status == INSTALLMENT_PENDING and installment.due_date < today:
            installment.status = INSTALLMENT_LATE
            marked += 1
    return marked


def _reopen_schedule(installments, remaining, unit) -> int:
    reopened = [i for i in installments if _is_closure(i)]
    if not reopened:
        return 0
    for installment, amount in zip(reopened, split_evenly(remaining, len(reopened), unit)):
        installment.amount = amount
        installment.status = INSTALLMENT_PENDING
        installment.paid_date = None
    return len(reopened)


def _apply_totals(sale: Sale, paid, remaining, installments) -> None:
    sale.paid_amount = paid
    sale.remaining_amount = remaining
    sale.paid_installments = _count_payments(installments)
    sale.status = derive_status(
        remaining,
        units_held=sale.quantity,
        units_returned=sale.return_quantity or 0,
    )


def pay_installment(
    db: Session,
    sale_id: int,
    *,
    paid_date: date,
    amount=None,
    payment_method: str = LEDGER_CASH,
    clock=system_clock,
) -> Sale:
    """
    Pay the earliest-due unpaid installment of a sale.

    When ``amount`` is omitted the scheduled amount is paid. Overdue
    installments are swept to LATE, and a payment that settles the sale
    closes whatever is left of the schedule.
    """
    _validate_amount(amount)
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError("Payment method must be one of {}".format(", ".join(PAYMENT_METHODS)))
    today = clock.today()

    with unit_of_work(db):
        sale = get_sale(db, sale_id)
        if sale.status in SALE_CLOSED_STATUSES:
            raise StateConflictError("Sale is already {}.".format(sale.status.lower()))

        installments = sale_installments(db, sale.id)
        unpaid = [i for i in installments if i.status in INSTALLMENT_UNPAID_STATUSES]
        if not unpaid:
            raise StateConflictError("No pending installments found.")
        _validate_paid_date(sale, paid_date, today)

        target = unpaid[0]
        amount = to_money(amount if amount is not None else target.amount)
        if amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        paid_installments_total = sum(
            (to_money(i.amount) for i in installments if i.status == INSTALLMENT_PAID), ZERO
        )
        paid, remaining = settle(
            sale.total_amount,
            sale.discount,
            paid_installments_total + to_money(sale.down_payment) + amount,
        )

        target.amount = amount
        target.status = INSTALLMENT_PAID
        target.paid_date = paid_date
        _mark_late(unpaid[1:], today)
        if remaining <= 0:
            close_schedule(installments, paid_date)

        ledger.record_entry(
            db,
            ledger_type=payment_method,
            direction=DIRECTION_IN,
            amount=amount,
            entry_date=paid_date,
            note="Installment payment for Sale ID {}".format(sale.id),
            sale_id=sale.id,
            installment_id=target.id,
        )
        _apply_totals(sale, paid, remaining, installments)

    logger.info(
        "Sale %s installment %s paid %s, remaining %s, status %s",
        sale.id,
        target.id,
        amount,
        sale.remaining_amount,
        sale.status,
        extra={"sale_id": sale.id, "installment_id": target.id},
    )
    return sale


def update_installment(
    db: Session,
    installment_id: int,
    *,
    amount=None,
    paid_date: date | None = None,
    clock=system_clock,
) -> Sale:
    """
    Correct the amount or date of a paid installment.

    Sale totals are rebuilt from every other paid installment plus the new
    amount, the installment's cash-book row is rewritten in place, and the
    rest of the schedule is closed or reopened to match the new balance.
    """
    _validate_amount(amount)
    today = clock.today()
    unit = get_settings().INSTALLMENT_ROUNDING_UNIT

    with unit_of_work(db):
        installment = get_installment(db, installment_id)
        if installment.status != INSTALLMENT_PAID:
            raise StateConflictError("Only PAID installments can be edited.")
        sale = get_sale(db, installment.sale_id)
        if sale.status == SALE_RETURNED:
            raise StateConflictError("Installments of a returned sale cannot be edited.")
        entries = ledger.linked_entries(db, installment_id=installment.id)
        if not entries:
            raise StateConflictError("Installment was closed without a payment and cannot be edited.")

        amount = to_money(amount if amount is not None else installment.amount)
        paid_date = paid_date or installment.paid_date
        _validate_paid_date(sale, paid_date, today)

        installments = sale_installments(db, sale.id)
        other_paid = sum(
            (
                to_money(i.amount)
                for i in installments
                if i.status == INSTALLMENT_PAID and i.id != installment.id
            ),
            ZERO,
        )
        paid, remaining = settle(
            sale.total_amount,
            sale.discount,
            other_paid + to_money(sale.down_payment) + amount,
        )

        installment.amount = amount
        installment.paid_date = paid_date
        for entry in entries:
            entry.amount = amount
            entry.date = paid_date

        if remaining <= 0:
            close_schedule(installments, paid_date)
        else:
            others = [i for i in installments if i.id != installment.id]
            reopened = _reopen_schedule(others, remaining, unit)
            if reopened:
                logger.info("Sale %s reopened %s closed installments", sale.id, reopened)
        _apply_totals(sale, paid, remaining, installments)

    logger.info(
        "Installment %s updated to %s on %s, sale %s status %s",
        installment.id,
        amount,
        paid_date,
        sale.id,
        sale.status,
        extra={"sale_id": sale.id, "installment_id": installment.id},
    )
    return sale


def sweep_late_installments(db: Session, *, sale_id: int | None = None, clock=system_clock) -> int:
    """Mark every PENDING installment that is past due as LATE."""
    stmt = (
        update(Installment)
        .where(
            Installment.status == INSTALLMENT_PENDING,
            Installment.due_date < clock.today(),
        )
        .values(status=INSTALLMENT_LATE)
    )
    if sale_id is not None:
        get_sale(db, sale_id)
        stmt = stmt.where(Installment.sale_id == sale_id)

    with unit_of_work(db):
        result = db.execute(stmt.execution_options(synchronize_session="fetch"))
    count = result.rowcount or 0
    if count:
        logger.info("Marked %s installments LATE", count)
    return count
