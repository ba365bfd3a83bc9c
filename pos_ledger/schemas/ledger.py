"""
Pydantic schemas for ledger queries.

Ledger rows are derived, never stored; these schemas only shape
the engine's output for HTTP clients.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from pos_ledger.models.enums import EventKind


class LedgerRowResponse(BaseModel):
    """One transaction with the balance before and after it."""
    id: str
    timestamp: datetime | None
    kind: EventKind
    amount: Decimal
    signed_amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    label: str
    notes: str

    model_config = {"from_attributes": True}


class CustomerHistoryResponse(BaseModel):
    """Rows are most recent first."""
    customer_id: str
    balance: Decimal
    rows: list[LedgerRowResponse]


class LedgerSummaryResponse(BaseModel):
    total_customers: int
    total_owed: Decimal
    customers_with_debt: int
    total_sales: int


class ReconcileRequest(BaseModel):
    """
    Raw records to reconcile without touching the database.

    Records may use any of the accepted field aliases
    (customerId / customer_id, saleDate / createdAt / date ...).
    """
    customer_id: str = Field(min_length=1)
    sales: list[dict[str, Any]] = Field(default_factory=list)
    debts: list[dict[str, Any]] = Field(default_factory=list)
    payments: list[dict[str, Any]] = Field(default_factory=list)
