from datetime import date as Date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class StockMovementCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)
    direction: Literal["IN", "OUT"]
    type: Literal["PURCHASE", "RETURN"]
    movement_date: Date
    note: Optional[str] = None
    payment_method: Literal["CASH", "BANK"] = "CASH"


class StockTransactionRead(BaseModel):
    id: int
    product_id: int
    sale_id: Optional[int] = None
    quantity: int
    direction: str
    type: str
    date: Date
    note: Optional[str] = None
    initial: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
