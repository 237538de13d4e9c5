import hmac
from typing import Optional

from fastapi import HTTPException, status

from retail_ledger.config import get_settings


def shop_api_keys() -> frozenset[str]:
    """Keys allowed to write to the ledger, from the comma separated ``API_KEYS`` setting."""
    raw = get_settings().API_KEYS or ""
    return frozenset(part.strip() for part in raw.split(",") if part.strip())


def auth_enabled() -> bool:
    return bool(shop_api_keys())


def check_api_key(api_key: Optional[str]) -> Optional[str]:
    """
    Return ``"api_key"`` when the presented key matches a configured one.

    With no keys configured the ledger runs open and ``None`` is returned.
    """
    keys = shop_api_keys()
    if not keys:
        return None

    candidate = (api_key or "").strip()
    if candidate and any(hmac.compare_digest(candidate, key) for key in keys):
        return "api_key"

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="A valid shop API key is required for ledger writes.",
    )
