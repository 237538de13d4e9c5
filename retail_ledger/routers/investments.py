from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from retail_ledger.dependencies import get_db, require_auth
from retail_ledger.schemas.common import ok
from retail_ledger.schemas.finance import InvestmentCreate, InvestmentRead, InvestmentUpdate
from retail_ledger.services import investment_service

router = APIRouter(prefix="/investments", tags=["Investments"])


@router.get("")
def list_investments(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    result = investment_service.list_investments(db, month=month, year=year, page=page, limit=limit)
    result["investments"] = [InvestmentRead.model_validate(row) for row in result["investments"]]
    return ok(result)


@router.post("", status_code=201)
def create_investment(payload: InvestmentCreate, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    investment = investment_service.create_investment(
        db,
        investor=payload.investor,
        amount=payload.amount,
        investment_date=payload.date,
        note=payload.note,
        method=payload.method,
    )
    return ok(InvestmentRead.model_validate(investment), "Investment recorded")


@router.put("/{investment_id}")
def update_investment(
    investment_id: int,
    payload: InvestmentUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    investment = investment_service.update_investment(
        db,
        investment_id,
        investor=payload.investor,
        amount=payload.amount,
        investment_date=payload.date,
        method=payload.method,
        note=payload.note,
    )
    return ok(InvestmentRead.model_validate(investment), "Investment updated")


@router.delete("/{investment_id}")
def delete_investment(investment_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    investment_service.delete_investment(db, investment_id)
    return ok(message="Investment deleted")


__all__ = ["router"]
