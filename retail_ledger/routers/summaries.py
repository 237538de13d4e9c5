from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from retail_ledger.dependencies import get_db, require_auth
from retail_ledger.schemas.common import ok, paged
from retail_ledger.schemas.summary import MonthlySummaryRead, SummaryRequest
from retail_ledger.services import summary_service

router = APIRouter(prefix="/summaries", tags=["Summaries"])


@router.get("")
def list_summaries(
    year: Optional[int] = Query(None),
    month: Optional[int] = Query(None, ge=1, le=12),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    result = summary_service.list_summaries(db, year=year, month=month, page=page, limit=limit)
    items = [MonthlySummaryRead.model_validate(row) for row in result["monthly_summaries"]]
    return ok(paged("monthly_summaries", result, items))


@router.get("/dashboard")
def dashboard(
    start_month: int = Query(..., ge=1, le=12),
    start_year: int = Query(..., ge=1),
    end_month: Optional[int] = Query(None, ge=1, le=12),
    end_year: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    return ok(summary_service.aggregate_range(db, start_month, start_year, end_month, end_year))


@router.post("")
def recompute_summary(payload: SummaryRequest, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    summary = summary_service.recompute_month(db, payload.month, payload.year)
    return ok(MonthlySummaryRead.model_validate(summary), "Monthly summary saved")


@router.delete("/{summary_id}")
def delete_summary(summary_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    summary_service.delete_summary(db, summary_id)
    return ok(message="Monthly summary deleted")


__all__ = ["router"]
