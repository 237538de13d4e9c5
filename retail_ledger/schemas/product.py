from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductBase(BaseModel):
    name: str = Field(min_length=2)
    category: str = ""
    brand: str = ""
    buying_price: Decimal = Field(ge=0)
    selling_price: Decimal = Field(gt=0)


class ProductCreate(ProductBase):
    stock_quantity: int = Field(gt=0)
    purchase_date: date
    note: Optional[str] = None
    payment_method: Literal["CASH", "BANK"] = "CASH"


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    category: Optional[str] = None
    brand: Optional[str] = None
    buying_price: Optional[Decimal] = Field(default=None, ge=0)
    selling_price: Optional[Decimal] = Field(default=None, gt=0)


class ProductRead(ProductBase):
    id: int
    stock_quantity: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductListItem(ProductRead):
    purchase_date: Optional[date] = None
