from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SummaryRequest(BaseModel):
    month: int = Field(ge=1, le=12)
    year: int = Field(ge=1)


class MonthlySummaryRead(BaseModel):
    id: int
    year: int
    month: int
    total_expense: Decimal
    total_debt: Decimal
    total_bank: Decimal
    total_cash: Decimal
    total_sales: Decimal
    cost_of_stock: Decimal
    gross_profit: Decimal
    net_profit: Decimal
    stock_value: Decimal
    total_investment: Decimal
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
