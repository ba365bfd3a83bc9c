"""
Shared enumerations for database models and the ledger engine.
"""

import enum


class EventKind(str, enum.Enum):
    """Which stream a ledger row came from."""
    SALE = "sale"
    DEBT = "debt"
    PAYMENT = "payment"


class PaymentMethod(str, enum.Enum):
    """How a customer settled (part of) their balance."""
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    MOBILE_MONEY = "mobile_money"
    OTHER = "other"
