from datetime import date, datetime, timezone


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def today(self) -> date:
        return date.today()


class FixedClock:
    """Clock pinned to a single instant; used by tests and replays."""

    def __init__(self, today: date):
        self._today = today

    def now(self) -> datetime:
        return datetime(self._today.year, self._today.month, self._today.day, 12, 0, tzinfo=timezone.utc)

    def today(self) -> date:
        return self._today


system_clock = SystemClock()


__all__ = ["FixedClock", "SystemClock", "system_clock"]
