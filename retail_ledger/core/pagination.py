from retail_ledger.config import get_settings


def normalize_page(page, limit) -> tuple[int, int, int]:
    """Return ``(page, limit, offset)`` with limits clamped to the configured bounds."""
    settings = get_settings()
    page = max(int(page or 1), 1)
    limit = int(limit or settings.DEFAULT_PAGE_SIZE)
    limit = max(1, min(limit, settings.MAX_PAGE_SIZE))
    return page, limit, (page - 1) * limit
