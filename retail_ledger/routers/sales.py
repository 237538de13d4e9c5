from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from retail_ledger.dependencies import get_clock, get_db, require_auth
from retail_ledger.schemas.common import ok, paged
from retail_ledger.schemas.sale import (
    InstallmentPayment,
    InstallmentUpdate,
    SaleCreate,
    SaleDetail,
    SaleListItem,
    SaleRead,
    SaleReturn,
)
from retail_ledger.services import installment_service, sale_service

router = APIRouter(prefix="/sales", tags=["Sales"])


def _detail(db: Session, sale_id: int) -> SaleDetail:
    return SaleDetail.model_validate(sale_service.get_sale_detail(db, sale_id), from_attributes=True)


@router.get("")
def list_sales(
    customer_id: Optional[int] = Query(None),
    customer_name: Optional[str] = Query(None),
    cnic: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    product_name: Optional[str] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    result = sale_service.list_sales(
        db,
        customer_id=customer_id,
        customer_name=customer_name,
        cnic=cnic,
        phone=phone,
        product_name=product_name,
        date_from=date_from,
        date_to=date_to,
        status=status,
        page=page,
        limit=limit,
    )
    items = [
        SaleListItem(
            **SaleRead.model_validate(row["sale"]).model_dump(),
            customer_name=row["customer_name"],
            product_name=row["product_name"],
        )
        for row in result["sales"]
    ]
    return ok(paged("sales", result, items))


@router.get("/{sale_id}")
def get_sale(sale_id: int, db: Session = Depends(get_db)):
    return ok(_detail(db, sale_id))


@router.post("", status_code=201)
def create_sale(payload: SaleCreate, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    sale = sale_service.create_sale(db, **payload.model_dump())
    return ok(_detail(db, sale.id), "Sale created")


@router.delete("/{sale_id}")
def delete_sale(sale_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    sale_service.delete_sale(db, sale_id)
    return ok(message="Sale deleted")


@router.put("/{sale_id}/return")
def return_sale(
    sale_id: int,
    payload: SaleReturn,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    sale = sale_service.return_sale(db, sale_id, **payload.model_dump())
    return ok(_detail(db, sale.id), "Sale returned")


@router.post("/installments/sweep")
def sweep_late_installments(
    sale_id: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    _auth=Depends(require_auth),
):
    marked = installment_service.sweep_late_installments(db, sale_id=sale_id, clock=clock)
    return ok({"marked_late": marked})


@router.post("/{sale_id}/installments")
def pay_installment(
    sale_id: int,
    payload: InstallmentPayment,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    _auth=Depends(require_auth),
):
    sale = installment_service.pay_installment(db, sale_id, clock=clock, **payload.model_dump())
    return ok(_detail(db, sale.id), "Installment paid")


@router.put("/installments/{installment_id}")
def update_installment(
    installment_id: int,
    payload: InstallmentUpdate,
    db: Session = Depends(get_db),
    clock=Depends(get_clock),
    _auth=Depends(require_auth),
):
    sale = installment_service.update_installment(
        db, installment_id, clock=clock, **payload.model_dump(exclude_none=True)
    )
    return ok(_detail(db, sale.id), "Installment updated")


__all__ = ["router"]
