"""
Customer API endpoints.

The API layer is thin: it handles HTTP concerns (status codes,
response formatting) and delegates all business logic to the
CustomerService.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from pos_ledger.models.base import get_db
from pos_ledger.services.customer_service import CustomerService
from pos_ledger.services.ledger_engine import ZERO
from pos_ledger.services import statement_service
from pos_ledger.schemas.customer import (
    CustomerCreate,
    CustomerUpdate,
    CustomerResponse,
    CustomerBalanceResponse,
)
from pos_ledger.schemas.ledger import CustomerHistoryResponse, LedgerRowResponse

router = APIRouter(prefix="/customers", tags=["Customers"])


@router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(
    request: CustomerCreate,
    db: Session = Depends(get_db),
):
    """Create a new customer."""
    service = CustomerService(db)
    try:
        customer = service.create_customer(request)
        db.commit()
        return customer
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[CustomerResponse])
def list_customers(
    search: str | None = None,
    db: Session = Depends(get_db),
):
    """List customers, optionally filtered by name, email, phone or address."""
    return CustomerService(db).list_customers(search)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(
    customer_id: str,
    db: Session = Depends(get_db),
):
    service = CustomerService(db)
    try:
        return service.get_customer(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: str,
    request: CustomerUpdate,
    db: Session = Depends(get_db),
):
    service = CustomerService(db)
    try:
        service.get_customer(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        customer = service.update_customer(customer_id, request)
        db.commit()
        return customer
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/{customer_id}", status_code=204)
def delete_customer(
    customer_id: str,
    db: Session = Depends(get_db),
):
    """
    Delete a customer.

    Customers with recorded sales, debts or payments cannot be
    deleted; their ledger must stay intact.
    """
    service = CustomerService(db)
    try:
        service.get_customer(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    try:
        service.delete_customer(customer_id)
        db.commit()
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    return Response(status_code=204)


@router.get("/{customer_id}/balance", response_model=CustomerBalanceResponse)
def get_customer_balance(
    customer_id: str,
    db: Session = Depends(get_db),
):
    """
    Get what the customer currently owes.

    The balance is derived from sales, debts and payments on
    every request; it is never stored.
    """
    service = CustomerService(db)
    try:
        customer = service.get_customer(customer_id)
        balance = service.get_balance(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return CustomerBalanceResponse(
        customer_id=customer.id,
        name=customer.name,
        balance=balance,
    )


@router.get("/{customer_id}/history", response_model=CustomerHistoryResponse)
def get_customer_history(
    customer_id: str,
    db: Session = Depends(get_db),
):
    """
    Get the customer's transactions with running balances,
    most recent first.
    """
    service = CustomerService(db)
    try:
        rows = service.get_history(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return CustomerHistoryResponse(
        customer_id=customer_id,
        balance=rows[0].balance_after if rows else ZERO,
        rows=[LedgerRowResponse.model_validate(row) for row in rows],
    )


@router.get("/{customer_id}/statement")
def get_customer_statement(
    customer_id: str,
    format: str = Query("csv", pattern="^(csv|html)$"),
    db: Session = Depends(get_db),
):
    """Export the customer's history as CSV or as a printable HTML page."""
    service = CustomerService(db)
    try:
        customer = service.get_customer(customer_id)
        rows = service.get_history(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if format == "html":
        return HTMLResponse(
            content=statement_service.render_html(customer.name, rows)
        )
    return Response(
        content=statement_service.render_csv(rows),
        media_type="text/csv",
        headers={
            "Content-Disposition": (
                f'attachment; filename="statement-{customer.id}.csv"'
            ),
        },
    )
