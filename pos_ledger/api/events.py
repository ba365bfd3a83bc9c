"""
Endpoints for recording sales, debts and payments.

Events are append-only: there are no update or delete routes.
Amounts are validated by the request schemas before anything
reaches the database.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pos_ledger.models.base import get_db
from pos_ledger.services.customer_service import CustomerService
from pos_ledger.schemas.events import (
    SaleCreate,
    SaleResponse,
    DebtCreate,
    DebtResponse,
    PaymentCreate,
    PaymentResponse,
)

router = APIRouter(tags=["Events"])


@router.post("/sales", response_model=SaleResponse, status_code=201)
def record_sale(
    request: SaleCreate,
    db: Session = Depends(get_db),
):
    """Record a sale. Omit customer_id for a walk-in sale."""
    service = CustomerService(db)
    try:
        sale = service.record_sale(request)
        db.commit()
        return sale
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.post(
    "/customers/{customer_id}/debts",
    response_model=DebtResponse,
    status_code=201,
)
def record_debt(
    customer_id: str,
    request: DebtCreate,
    db: Session = Depends(get_db),
):
    service = CustomerService(db)
    try:
        service.get_customer(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        debt = service.record_debt(customer_id, request)
        db.commit()
        return debt
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.post(
    "/customers/{customer_id}/payments",
    response_model=PaymentResponse,
    status_code=201,
)
def record_payment(
    customer_id: str,
    request: PaymentCreate,
    db: Session = Depends(get_db),
):
    """
    Record a payment against the customer's balance.

    Overpayment is allowed and leaves the customer in credit.
    """
    service = CustomerService(db)
    try:
        service.get_customer(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        payment = service.record_payment(customer_id, request)
        db.commit()
        return payment
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
