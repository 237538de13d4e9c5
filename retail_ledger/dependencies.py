from fastapi import Request

from retail_ledger.config import get_settings
from retail_ledger.core.clock import system_clock
from retail_ledger.core.security import check_api_key
from retail_ledger.database.session import get_db


def require_auth(request: Request):
    api_key = request.headers.get(get_settings().API_KEY_HEADER)
    return check_api_key(api_key)


def get_clock():
    return system_clock


__all__ = ["get_clock", "get_db", "require_auth"]
