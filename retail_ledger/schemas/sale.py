from datetime import date as Date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from retail_ledger.schemas.customer import CustomerRead
from retail_ledger.schemas.product import ProductRead


class SaleCreate(BaseModel):
    customer_id: int
    product_id: int
    sale_date: Date
    sale_type: Literal["CASH", "INSTALLMENT"] = "CASH"
    quantity: int = Field(default=1, gt=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    payment_method: Literal["CASH", "BANK"] = "CASH"
    down_payment: Decimal = Field(default=Decimal("0"), ge=0)
    total_installments: Optional[int] = Field(default=None, ge=1)
    note: Optional[str] = None


class SaleReturn(BaseModel):
    return_date: Date
    quantity: int = Field(gt=0)
    refund_method: Literal["CASH", "BANK"] = "CASH"
    note: Optional[str] = None


class InstallmentPayment(BaseModel):
    paid_date: Date
    amount: Optional[Decimal] = Field(default=None, gt=0)
    payment_method: Literal["CASH", "BANK"] = "CASH"


class InstallmentUpdate(BaseModel):
    amount: Optional[Decimal] = Field(default=None, gt=0)
    paid_date: Optional[Date] = None


class InstallmentRead(BaseModel):
    id: int
    sale_id: int
    amount: Decimal
    due_date: Date
    paid_date: Optional[Date] = None
    status: str

    model_config = ConfigDict(from_attributes=True)


class SaleRead(BaseModel):
    id: int
    customer_id: int
    product_id: int
    sale_date: Date
    sale_type: str
    payment_method: str
    quantity: int
    discount: Decimal
    total_amount: Decimal
    down_payment: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    per_installment: Decimal
    total_installments: int
    paid_installments: int
    return_quantity: int
    return_amount: Decimal
    status: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SaleListItem(SaleRead):
    customer_name: str
    product_name: str


class SaleDetail(BaseModel):
    sale: SaleRead
    customer: CustomerRead
    product: ProductRead
    installments: List[InstallmentRead] = Field(default_factory=list)
