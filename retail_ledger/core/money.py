from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal

MONEY_QUANT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, float):
        value = repr(value)
    return Decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def split_evenly(total, parts: int, unit=Decimal("1")) -> list[Decimal]:
    """
    Split ``total`` into ``parts`` amounts rounded down to ``unit``.
    The last amount takes the remainder, so the amounts always sum to ``total``.
    """
    total = to_money(total)
    if parts <= 0:
        return []
    unit = Decimal(unit)
    base = (total / parts).quantize(unit, rounding=ROUND_DOWN)
    base = to_money(base)
    amounts = [base] * (parts - 1)
    amounts.append(to_money(total - base * (parts - 1)))
    return amounts
