from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from retail_ledger.dependencies import get_db, require_auth
from retail_ledger.schemas.common import ok, paged
from retail_ledger.schemas.stock import StockMovementCreate, StockTransactionRead
from retail_ledger.services import stock_service

router = APIRouter(prefix="/stock", tags=["Stock"])


@router.get("")
def list_stock_transactions(
    product_id: Optional[int] = Query(None),
    type: Optional[str] = Query(None),
    direction: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    result = stock_service.list_stock_transactions(
        db, product_id=product_id, movement_type=type, direction=direction, page=page, limit=limit
    )
    items = [StockTransactionRead.model_validate(row) for row in result["stock_transactions"]]
    return ok(paged("stock_transactions", result, items))


@router.post("", status_code=201)
def create_stock_transaction(
    payload: StockMovementCreate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    movement = stock_service.apply_stock_movement(
        db,
        payload.product_id,
        quantity=payload.quantity,
        direction=payload.direction,
        movement_type=payload.type,
        movement_date=payload.movement_date,
        note=payload.note,
        payment_method=payload.payment_method,
    )
    return ok(StockTransactionRead.model_validate(movement), "Stock updated")


@router.delete("/{stock_id}")
def delete_stock_transaction(stock_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    product = stock_service.delete_stock_transaction(db, stock_id)
    return ok({"product_id": product.id, "stock_quantity": product.stock_quantity}, "Stock transaction deleted")


__all__ = ["router"]
