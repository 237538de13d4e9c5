from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from retail_ledger.dependencies import get_db, require_auth
from retail_ledger.schemas.common import ok, paged
from retail_ledger.schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate
from retail_ledger.services import customer_service
from retail_ledger.services.lookups import get_customer

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get("")
def list_customers(
    query: Optional[str] = Query(None, description="Name, CNIC or phone"),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    result = customer_service.list_customers(db, query=query, page=page, limit=limit)
    items = [CustomerRead.model_validate(row) for row in result["customers"]]
    return ok(paged("customers", result, items))


@router.get("/{customer_id}")
def read_customer(customer_id: int, db: Session = Depends(get_db)):
    return ok(CustomerRead.model_validate(get_customer(db, customer_id)))


@router.post("", status_code=201)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    customer = customer_service.create_customer(db, **payload.model_dump())
    return ok(CustomerRead.model_validate(customer), "Customer created")


@router.put("/{customer_id}")
def update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    customer = customer_service.update_customer(db, customer_id, **payload.model_dump(exclude_none=True))
    return ok(CustomerRead.model_validate(customer), "Customer updated")


@router.delete("/{customer_id}")
def delete_customer(customer_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    customer_service.delete_customer(db, customer_id)
    return ok(message="Customer deleted")


__all__ = ["router"]
