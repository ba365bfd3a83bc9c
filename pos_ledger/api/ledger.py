"""
Ledger endpoints across customers.

/ledger/reconcile runs the engine on records supplied in the
request body and never reads or writes the database.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pos_ledger.models.base import get_db
from pos_ledger.services.customer_service import CustomerService
from pos_ledger.services.ledger_engine import CustomerLedgerEngine, ZERO
from pos_ledger.services.normalize import normalize_records
from pos_ledger.schemas.customer import CustomerBalanceResponse
from pos_ledger.schemas.ledger import (
    CustomerHistoryResponse,
    LedgerRowResponse,
    LedgerSummaryResponse,
    ReconcileRequest,
)

router = APIRouter(prefix="/ledger", tags=["Ledger"])


@router.get("/summary", response_model=LedgerSummaryResponse)
def get_summary(db: Session = Depends(get_db)):
    """Totals for the customers overview."""
    return LedgerSummaryResponse(**CustomerService(db).get_summary())


@router.get("/balances", response_model=list[CustomerBalanceResponse])
def list_balances(db: Session = Depends(get_db)):
    """Every customer with their current balance."""
    return [
        CustomerBalanceResponse(
            customer_id=customer.id,
            name=customer.name,
            balance=balance,
        )
        for customer, balance in CustomerService(db).list_balances()
    ]


@router.post("/reconcile", response_model=CustomerHistoryResponse)
def reconcile(request: ReconcileRequest):
    """
    Reconcile raw sale, debt and payment records for one customer.

    Malformed amounts count as zero instead of failing the request.
    """
    sales, debts, payments = normalize_records(
        request.sales, request.debts, request.payments
    )
    engine = CustomerLedgerEngine()
    rows = engine.build_history(request.customer_id, sales, debts, payments)

    return CustomerHistoryResponse(
        customer_id=request.customer_id,
        balance=engine.compute_balance(
            request.customer_id, sales, debts, payments
        ),
        rows=[LedgerRowResponse.model_validate(row) for row in rows],
    )
