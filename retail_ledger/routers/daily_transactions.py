from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from retail_ledger.dependencies import get_db, require_auth
from retail_ledger.schemas.common import ok, paged
from retail_ledger.schemas.finance import DailyTransactionCreate, DailyTransactionRead, DailyTransactionUpdate
from retail_ledger.services import daily_transaction_service

router = APIRouter(prefix="/daily-transactions", tags=["Daily Transactions"])


@router.get("")
def list_daily_transactions(
    type: Optional[str] = Query(None),
    direction: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    result = daily_transaction_service.list_daily_transactions(
        db,
        ledger_type=type,
        direction=direction,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
    )
    items = [DailyTransactionRead.model_validate(row) for row in result["daily_transactions"]]
    return ok(paged("daily_transactions", result, items))


@router.post("", status_code=201)
def create_daily_transaction(
    payload: DailyTransactionCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    entry = daily_transaction_service.create_daily_transaction(
        db,
        ledger_type=payload.type,
        direction=payload.direction,
        amount=payload.amount,
        entry_date=payload.date,
        note=payload.note,
    )
    return ok(DailyTransactionRead.model_validate(entry), "Transaction recorded")


@router.put("/{entry_id}")
def update_daily_transaction(
    entry_id: int,
    payload: DailyTransactionUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    entry = daily_transaction_service.update_daily_transaction(
        db,
        entry_id,
        ledger_type=payload.type,
        direction=payload.direction,
        amount=payload.amount,
        entry_date=payload.date,
        note=payload.note,
    )
    return ok(DailyTransactionRead.model_validate(entry), "Transaction updated")


@router.delete("/{entry_id}")
def delete_daily_transaction(entry_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    daily_transaction_service.delete_daily_transaction(db, entry_id)
    return ok(message="Transaction deleted")


__all__ = ["router"]
