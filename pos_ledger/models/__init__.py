"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from pos_ledger.models.base import Base
from pos_ledger.models.enums import EventKind, PaymentMethod
from pos_ledger.models.customer import Customer
from pos_ledger.models.sale import Sale
from pos_ledger.models.debt import Debt
from pos_ledger.models.payment import Payment

__all__ = [
    "Base",
    "EventKind",
    "PaymentMethod",
    "Customer",
    "Sale",
    "Debt",
    "Payment",
]
