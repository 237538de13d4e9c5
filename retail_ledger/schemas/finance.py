from datetime import date as Date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class DailyTransactionCreate(BaseModel):
    type: Literal["CASH", "BANK", "EXPENSE", "DEBT"]
    direction: Optional[Literal["IN", "OUT"]] = None
    amount: Decimal = Field(gt=0)
    date: Date
    note: Optional[str] = None


class DailyTransactionUpdate(BaseModel):
    type: Optional[Literal["CASH", "BANK", "EXPENSE", "DEBT"]] = None
    direction: Optional[Literal["IN", "OUT"]] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    date: Optional[Date] = None
    note: Optional[str] = None


class DailyTransactionRead(BaseModel):
    id: int
    type: str
    direction: str
    amount: Decimal
    date: Date
    note: Optional[str] = None
    sale_id: Optional[int] = None
    product_id: Optional[int] = None
    stock_id: Optional[int] = None
    installment_id: Optional[int] = None
    investment_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class InvestmentCreate(BaseModel):
    investor: str = Field(min_length=1)
    amount: Decimal = Field(gt=0)
    date: Date
    method: Literal["CASH", "BANK"] = "CASH"
    note: Optional[str] = None


class InvestmentUpdate(BaseModel):
    investor: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[Decimal] = Field(default=None, gt=0)
    date: Optional[Date] = None
    method: Optional[Literal["CASH", "BANK"]] = None
    note: Optional[str] = None


class InvestmentRead(BaseModel):
    id: int
    investor: str
    amount: Decimal
    date: Date
    method: str
    note: str = ""

    model_config = ConfigDict(from_attributes=True)
