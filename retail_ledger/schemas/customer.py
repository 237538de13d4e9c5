from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CustomerBase(BaseModel):
    name: str = Field(min_length=2)
    cnic: str = Field(min_length=13, max_length=13)
    phone: str = Field(min_length=9, max_length=11)
    address: str
    email: Optional[str] = None


class CustomerCreate(CustomerBase):
    pass


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2)
    cnic: Optional[str] = Field(default=None, min_length=13, max_length=13)
    phone: Optional[str] = Field(default=None, min_length=9, max_length=11)
    address: Optional[str] = None
    email: Optional[str] = None


class CustomerRead(CustomerBase):
    id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
