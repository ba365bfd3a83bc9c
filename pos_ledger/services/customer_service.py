"""
Customer service: customers, their events, and their ledger.

This service is the validation and data-access layer around the
ledger engine. Recording a sale, debt or payment appends a row to
storage; balance and history queries load the stored events,
convert them to engine events and let the engine reconcile them.

Balances are never stored. They are always derived from the
events, so they cannot drift out of sync.
"""

import logging
from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from pos_ledger.models.customer import Customer
from pos_ledger.models.sale import Sale
from pos_ledger.models.debt import Debt
from pos_ledger.models.payment import Payment
from pos_ledger.schemas.customer import CustomerCreate, CustomerUpdate
from pos_ledger.schemas.events import SaleCreate, DebtCreate, PaymentCreate
from pos_ledger.services.ledger_engine import (
    CustomerLedgerEngine,
    SaleEvent,
    DebtEvent,
    PaymentEvent,
    LedgerRow,
    ZERO,
    to_naive_utc,
)

logger = logging.getLogger(__name__)


# --- Storage -> engine conversion ---

def sale_event(sale: Sale) -> SaleEvent:
    return SaleEvent(
        id=str(sale.id),
        customer_id=sale.customer_id,
        total=sale.total,
        timestamp=sale.sale_date,
        payment_method=sale.payment_method,
        notes=sale.notes or "",
    )


def debt_event(debt: Debt) -> DebtEvent:
    return DebtEvent(
        id=str(debt.id),
        customer_id=debt.customer_id,
        amount=debt.amount,
        reason=debt.reason,
        timestamp=debt.created_at,
        notes=debt.notes or "",
    )


def payment_event(payment: Payment) -> PaymentEvent:
    return PaymentEvent(
        id=str(payment.id),
        customer_id=payment.customer_id,
        amount=payment.amount,
        method=payment.method,
        timestamp=payment.created_at,
        notes=payment.notes or "",
    )


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


class CustomerService:
    """
    All customer and ledger operations pass through this service.

    The service takes a database session as a constructor
    argument. The caller controls the transaction boundary and
    decides when to commit or rollback.
    """

    def __init__(self, db: Session):
        self.db = db
        self.engine = CustomerLedgerEngine()

    # --- Customers ---

    def create_customer(self, request: CustomerCreate) -> Customer:
        """
        Create a new customer.

        Raises ValueError if another customer already uses the email.
        """
        email = _clean(request.email)
        if email:
            email = email.lower()
            self._ensure_email_free(email)

        customer = Customer(
            name=request.name.strip(),
            email=email,
            phone=_clean(request.phone),
            address=_clean(request.address),
        )
        self.db.add(customer)
        self.db.flush()
        logger.info("Created customer %s (%s)", customer.id, customer.name)
        return customer

    def update_customer(
        self, customer_id: str, request: CustomerUpdate
    ) -> Customer:
        customer = self.get_customer(customer_id)
        changes = request.model_dump(exclude_unset=True)

        if changes.get("name") is not None:
            customer.name = changes["name"].strip()
        if "email" in changes:
            email = _clean(changes["email"])
            email = email.lower() if email else None
            if email and email != customer.email:
                self._ensure_email_free(email, exclude_id=customer.id)
            customer.email = email
        if "phone" in changes:
            customer.phone = _clean(changes["phone"])
        if "address" in changes:
            customer.address = _clean(changes["address"])

        self.db.flush()
        return customer

    def delete_customer(self, customer_id: str) -> None:
        """
        Delete a customer with no recorded events.

        Events are append-only, so a customer who appears in the
        ledger cannot be removed.
        """
        customer = self.get_customer(customer_id)
        sales, debts, payments = self._load_events(customer_id)
        if sales or debts or payments:
            raise ValueError(
                f"Customer {customer_id} has ledger history and cannot be deleted"
            )
        self.db.delete(customer)
        self.db.flush()
        logger.info("Deleted customer %s", customer_id)

    def get_customer(self, customer_id: str) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if not customer:
            raise ValueError(f"Customer {customer_id} not found")
        return customer

    def list_customers(self, search: str | None = None) -> list[Customer]:
        """
        List customers, newest first.

        search matches name, email, phone or address,
        case-insensitively.
        """
        query = select(Customer).order_by(Customer.created_at.desc())
        term = _clean(search)
        if term:
            pattern = f"%{term.lower()}%"
            query = query.where(or_(
                func.lower(Customer.name).like(pattern),
                func.lower(Customer.email).like(pattern),
                func.lower(Customer.phone).like(pattern),
                func.lower(Customer.address).like(pattern),
            ))
        return list(self.db.execute(query).scalars().all())

    def _ensure_email_free(self, email: str, exclude_id: str | None = None):
        query = select(Customer).where(Customer.email == email)
        if exclude_id is not None:
            query = query.where(Customer.id != exclude_id)
        if self.db.execute(query).scalar_one_or_none():
            raise ValueError(f"Customer with email '{email}' already exists")

    # --- Events ---

    def record_sale(self, request: SaleCreate) -> Sale:
        """Record a sale. A sale without a customer is a walk-in sale."""
        if request.customer_id is not None:
            self.get_customer(request.customer_id)

        sale = Sale(
            customer_id=request.customer_id,
            total=request.total,
            payment_method=_clean(request.payment_method),
            notes=_clean(request.notes),
        )
        if request.occurred_at is not None:
            sale.sale_date = to_naive_utc(request.occurred_at)
        self.db.add(sale)
        self.db.flush()
        logger.info(
            "Recorded sale %s of %s for %s",
            sale.id, sale.total, sale.customer_id or "walk-in",
        )
        return sale

    def record_debt(self, customer_id: str, request: DebtCreate) -> Debt:
        self.get_customer(customer_id)

        debt = Debt(
            customer_id=customer_id,
            amount=request.amount,
            reason=request.reason.strip(),
            notes=_clean(request.notes),
        )
        if request.occurred_at is not None:
            debt.created_at = to_naive_utc(request.occurred_at)
        self.db.add(debt)
        self.db.flush()
        logger.info(
            "Recorded debt %s of %s for %s (%s)",
            debt.id, debt.amount, customer_id, debt.reason,
        )
        return debt

    def record_payment(
        self, customer_id: str, request: PaymentCreate
    ) -> Payment:
        """
        Record a payment.

        Payments larger than the balance are accepted; the
        customer then holds store credit (a negative balance).
        """
        self.get_customer(customer_id)

        payment = Payment(
            customer_id=customer_id,
            amount=request.amount,
            method=request.method,
            notes=_clean(request.notes),
        )
        if request.occurred_at is not None:
            payment.created_at = to_naive_utc(request.occurred_at)
        self.db.add(payment)
        self.db.flush()
        logger.info(
            "Recorded payment %s of %s from %s (%s)",
            payment.id, payment.amount, customer_id, payment.method.value,
        )
        return payment

    def _load_events(
        self, customer_id: str | None = None
    ) -> tuple[list[SaleEvent], list[DebtEvent], list[PaymentEvent]]:
        """
        Load stored events as engine events, in insertion order.

        With a customer_id only that customer's events are loaded;
        the engine filters again regardless.
        """
        sales_q = select(Sale).order_by(Sale.id)
        debts_q = select(Debt).order_by(Debt.id)
        payments_q = select(Payment).order_by(Payment.id)
        if customer_id is not None:
            sales_q = sales_q.where(Sale.customer_id == customer_id)
            debts_q = debts_q.where(Debt.customer_id == customer_id)
            payments_q = payments_q.where(Payment.customer_id == customer_id)

        sales = [sale_event(s) for s in self.db.execute(sales_q).scalars()]
        debts = [debt_event(d) for d in self.db.execute(debts_q).scalars()]
        payments = [
            payment_event(p) for p in self.db.execute(payments_q).scalars()
        ]
        return sales, debts, payments

    # --- Ledger ---

    def get_balance(self, customer_id: str) -> Decimal:
        """What the customer owes right now. Negative means store credit."""
        self.get_customer(customer_id)
        sales, debts, payments = self._load_events(customer_id)
        return self.engine.compute_balance(customer_id, sales, debts, payments)

    def get_history(self, customer_id: str) -> list[LedgerRow]:
        """The customer's ledger rows, most recent first."""
        self.get_customer(customer_id)
        sales, debts, payments = self._load_events(customer_id)
        return self.engine.build_history(customer_id, sales, debts, payments)

    def list_balances(self) -> list[tuple[Customer, Decimal]]:
        """Every customer with their current balance."""
        customers = self.list_customers()
        sales, debts, payments = self._load_events()
        balances = self.engine.compute_balances(
            [c.id for c in customers], sales, debts, payments
        )
        return [(c, balances.get(c.id, ZERO)) for c in customers]

    def get_summary(self) -> dict:
        """
        Totals for the customers overview.

        total_owed nets store credit against debt, the same way
        each individual balance does.
        """
        balances = [balance for _, balance in self.list_balances()]
        linked_sales = self.db.execute(
            select(func.count(Sale.id)).where(Sale.customer_id.is_not(None))
        ).scalar()

        return {
            "total_customers": len(balances),
            "total_owed": sum(balances, ZERO),
            "customers_with_debt": sum(1 for b in balances if b > 0),
            "total_sales": linked_sales or 0,
        }
