import calendar
from datetime import date


def add_months(value: date, months: int) -> date:
    """Shift ``value`` by whole months, clamping to the last day of short months."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def month_bounds(month: int, year: int) -> tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_months(start_month: int, start_year: int, end_month: int, end_year: int):
    """Yield ``(month, year)`` pairs covering both bounds, whichever order they come in."""
    start_key = start_year * 12 + (start_month - 1)
    end_key = end_year * 12 + (end_month - 1)
    if start_key > end_key:
        start_key, end_key = end_key, start_key
    for key in range(start_key, end_key + 1):
        yield key % 12 + 1, key // 12
