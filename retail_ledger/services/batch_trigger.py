import logging
import threading

from retail_ledger.config import get_settings
from retail_ledger.core.clock import system_clock
from retail_ledger.core.errors import LedgerError
from retail_ledger.services.summary_service import recompute_month

logger = logging.getLogger(__name__)


class SummaryBatchTrigger:
    """
    Refresh the current month's summary after every ``threshold`` writes.

    The counter lives in process memory, so each worker keeps its own.
    """

    def __init__(self, threshold: int | None = None, *, enabled: bool | None = None, clock=system_clock):
        settings = get_settings()
        self.threshold = max(int(threshold or settings.SUMMARY_WRITE_THRESHOLD), 1)
        self.enabled = settings.SUMMARY_BATCH_ENABLED if enabled is None else enabled
        self.clock = clock
        self.writes = 0
        self._lock = threading.Lock()

    def record_write(self, session_factory) -> bool:
        """Count one successful write; return True when a recompute ran."""
        if not self.enabled:
            return False
        with self._lock:
            self.writes += 1
            if self.writes < self.threshold:
                return False
            self.writes = 0

        today = self.clock.today()
        db = session_factory()
        try:
            recompute_month(db, today.month, today.year)
        except LedgerError:
            logger.exception("Batch summary refresh failed for %04d-%02d", today.year, today.month)
            return False
        finally:
            db.close()
        logger.info("Batch summary refresh ran for %04d-%02d", today.year, today.month)
        return True


__all__ = ["SummaryBatchTrigger"]
