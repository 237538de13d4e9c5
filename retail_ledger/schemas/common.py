from typing import Any


def ok(data: Any = None, message: str = "") -> dict:
    return {"success": True, "message": message, "data": data}


def paged(key: str, result: dict, items: list) -> dict:
    return {key: items, "total": result["total"], "page": result["page"], "limit": result["limit"]}
