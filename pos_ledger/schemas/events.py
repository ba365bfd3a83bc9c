"""
Pydantic schemas for recording sales, debts and payments.

These are the validation layer in front of the ledger: amounts
must be positive here, so bad data never reaches storage.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from pos_ledger.models.enums import PaymentMethod


# --- Request Schemas ---

class SaleCreate(BaseModel):
    """A sale. Leave customer_id out for a walk-in sale."""
    customer_id: str | None = None
    total: Decimal = Field(gt=0, decimal_places=4)
    payment_method: str | None = Field(default=None, max_length=50)
    notes: str | None = None
    occurred_at: datetime | None = None


class DebtCreate(BaseModel):
    """
    A manually recorded debt.

    Usual reasons are loan, credit_purchase, service_fee,
    penalty and other, but any text is accepted.
    """
    amount: Decimal = Field(gt=0, decimal_places=4)
    reason: str = Field(min_length=1, max_length=100)
    notes: str | None = None
    occurred_at: datetime | None = None


class PaymentCreate(BaseModel):
    amount: Decimal = Field(gt=0, decimal_places=4)
    method: PaymentMethod = PaymentMethod.CASH
    notes: str | None = None
    occurred_at: datetime | None = None


# --- Response Schemas ---

class SaleResponse(BaseModel):
    id: int
    customer_id: str | None
    total: Decimal
    payment_method: str | None
    notes: str | None
    sale_date: datetime

    model_config = {"from_attributes": True}


class DebtResponse(BaseModel):
    id: int
    customer_id: str
    amount: Decimal
    reason: str
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class PaymentResponse(BaseModel):
    id: int
    customer_id: str
    amount: Decimal
    method: PaymentMethod
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
