"""
Pydantic schemas for customer operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)


class CustomerUpdate(BaseModel):
    """Partial update; fields left out are not touched."""
    name: str | None = Field(default=None, min_length=1, max_length=200)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=500)


class CustomerResponse(BaseModel):
    id: str
    name: str
    email: str | None
    phone: str | None
    address: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CustomerBalanceResponse(BaseModel):
    """A customer's outstanding balance. Negative means store credit."""
    customer_id: str
    name: str
    balance: Decimal
