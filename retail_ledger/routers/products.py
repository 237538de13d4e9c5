from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from retail_ledger.dependencies import get_db, require_auth
from retail_ledger.schemas.common import ok, paged
from retail_ledger.schemas.product import ProductCreate, ProductListItem, ProductRead, ProductUpdate
from retail_ledger.services import product_service

router = APIRouter(prefix="/products", tags=["Products"])


@router.get("")
def list_products(
    name: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    brand: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    result = product_service.list_products(
        db, name=name, category=category, brand=brand, page=page, limit=limit
    )
    items = [
        ProductListItem.model_validate(row["product"]).model_copy(update={"purchase_date": row["purchase_date"]})
        for row in result["products"]
    ]
    return ok(paged("products", result, items))


@router.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ok(product_service.get_product_details(db, product_id))


@router.post("", status_code=201)
def create_product(payload: ProductCreate, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    product = product_service.create_product(
        db,
        name=payload.name,
        category=payload.category,
        brand=payload.brand,
        buying_price=payload.buying_price,
        selling_price=payload.selling_price,
        stock_quantity=payload.stock_quantity,
        purchase_date=payload.purchase_date,
        note=payload.note,
        payment_method=payload.payment_method,
    )
    return ok(ProductRead.model_validate(product), "Product created")


@router.put("/{product_id}")
def update_product(
    product_id: int,
    payload: ProductUpdate,
    db: Session = Depends(get_db),
    _auth=Depends(require_auth),
):
    product = product_service.update_product(db, product_id, **payload.model_dump(exclude_none=True))
    return ok(ProductRead.model_validate(product), "Product updated")


@router.delete("/{product_id}")
def delete_product(product_id: int, db: Session = Depends(get_db), _auth=Depends(require_auth)):
    product_service.delete_product(db, product_id)
    return ok(message="Product deleted")


__all__ = ["router"]
