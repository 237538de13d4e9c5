from datetime import date
from decimal import Decimal

from retail_ledger.core.constants import (
    INSTALLMENT_PAID,
    INSTALLMENT_UNPAID_STATUSES,
    SALE_ACTIVE,
    SALE_COMPLETED,
    SALE_PARTIAL,
    SALE_RETURNED,
)
from retail_ledger.core.dates import add_months
from retail_ledger.core.errors import OverpaymentError
from retail_ledger.core.money import ZERO, split_evenly, to_money


def net_amount(total_amount, discount) -> Decimal:
    return to_money(total_amount) - to_money(discount)


def settle(total_amount, discount, paid_amount) -> tuple[Decimal, Decimal]:
    """
    Return ``(paid, remaining)`` for a sale that has received ``paid_amount``.

    Raises ``OverpaymentError`` when the payments exceed what is owed.
    """
    net = net_amount(total_amount, discount)
    paid = to_money(paid_amount)
    if paid > net:
        raise OverpaymentError(
            "Paid amount {} cannot exceed the amount owed {}".format(paid, net)
        )
    return paid, max(net - paid, ZERO)


def derive_status(remaining, *, units_held: int, units_returned: int) -> str:
    if units_held <= 0 and units_returned > 0:
        return SALE_RETURNED
    if to_money(remaining) <= 0:
        return SALE_COMPLETED
    if units_returned > 0:
        return SALE_PARTIAL
    return SALE_ACTIVE


def derive_status_after_return(units_held: int) -> str:
    return SALE_RETURNED if units_held <= 0 else SALE_PARTIAL


def build_schedule(remaining, count: int, start: date, unit=Decimal("1")) -> list[tuple[Decimal, date]]:
    """Monthly schedule after ``start``; amounts sum to ``remaining`` exactly."""
    amounts = split_evenly(remaining, count, unit)
    return [(amount, add_months(start, index + 1)) for index, amount in enumerate(amounts)]


def close_schedule(installments, closed_on: date) -> None:
    """Zero and mark PAID every unpaid installment once nothing is owed."""
    for installment in installments:
        if installment.status in INSTALLMENT_UNPAID_STATUSES:
            installment.amount = ZERO
            installment.status = INSTALLMENT_PAID
            installment.paid_date = closed_on


def respread_schedule(installments, remaining, unit=Decimal("1")) -> int:
    """Spread ``remaining`` over the unpaid installments, keeping their due dates."""
    unpaid = [i for i in installments if i.status in INSTALLMENT_UNPAID_STATUSES]
    for installment, amount in zip(unpaid, split_evenly(remaining, len(unpaid), unit)):
        installment.amount = amount
    return len(unpaid)
