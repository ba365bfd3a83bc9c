"""Business logic services."""

from pos_ledger.services.ledger_engine import CustomerLedgerEngine
from pos_ledger.services.customer_service import CustomerService

__all__ = ["CustomerLedgerEngine", "CustomerService"]
