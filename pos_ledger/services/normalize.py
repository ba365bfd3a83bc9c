"""
Normalization of raw sale, debt and payment records.

Records arriving from clients or older exports do not agree on
field names (a sale may carry its time in saleDate, createdAt or
date). This module resolves those aliases once, so the ledger
engine only ever sees one canonical timestamp and one canonical
amount per event.

Amounts are passed through untouched; the engine decides what
counts as a valid amount.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from pos_ledger.services.ledger_engine import SaleEvent, DebtEvent, PaymentEvent

logger = logging.getLogger(__name__)

# First alias present wins.
SALE_TIMESTAMP_FIELDS = ("saleDate", "sale_date", "createdAt", "created_at", "date")
EVENT_TIMESTAMP_FIELDS = ("date", "createdAt", "created_at")
CUSTOMER_ID_FIELDS = ("customerId", "customer_id")


def _first(record: Mapping[str, Any], fields: Iterable[str]) -> Any:
    for field in fields:
        value = record.get(field)
        if value not in (None, ""):
            return value
    return None


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a datetime, an ISO-8601 string or epoch milliseconds.

    A trailing 'Z' is read as UTC, as are epoch milliseconds.
    Anything unparseable is treated as a missing timestamp rather
    than an error.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            logger.warning("Unparseable timestamp %r; treating as missing", value)
            return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            logger.warning("Out of range timestamp %r; treating as missing", value)
            return None
    logger.warning("Unsupported timestamp %r; treating as missing", value)
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _customer_id(record: Mapping[str, Any]) -> str | None:
    value = _first(record, CUSTOMER_ID_FIELDS)
    return str(value) if value is not None else None


def _record_id(record: Mapping[str, Any], kind: str, index: int) -> str:
    value = record.get("id")
    if value in (None, ""):
        return f"{kind}-{index}"
    return str(value)


def normalize_sale(record: Mapping[str, Any], index: int = 0) -> SaleEvent:
    return SaleEvent(
        id=_record_id(record, "sale", index),
        customer_id=_customer_id(record),
        total=record.get("total"),
        timestamp=parse_timestamp(_first(record, SALE_TIMESTAMP_FIELDS)),
        payment_method=_first(record, ("paymentMethod", "payment_method")),
        notes=_text(record.get("notes")),
    )


def normalize_debt(record: Mapping[str, Any], index: int = 0) -> DebtEvent:
    return DebtEvent(
        id=_record_id(record, "debt", index),
        customer_id=_customer_id(record),
        amount=record.get("amount"),
        reason=record.get("reason"),
        timestamp=parse_timestamp(_first(record, EVENT_TIMESTAMP_FIELDS)),
        notes=_text(record.get("notes")),
    )


def normalize_payment(record: Mapping[str, Any], index: int = 0) -> PaymentEvent:
    return PaymentEvent(
        id=_record_id(record, "payment", index),
        customer_id=_customer_id(record),
        amount=record.get("amount"),
        method=record.get("method"),
        timestamp=parse_timestamp(_first(record, EVENT_TIMESTAMP_FIELDS)),
        notes=_text(record.get("notes")),
    )


def normalize_records(
    sales: Iterable[Mapping[str, Any]] = (),
    debts: Iterable[Mapping[str, Any]] = (),
    payments: Iterable[Mapping[str, Any]] = (),
) -> tuple[list[SaleEvent], list[DebtEvent], list[PaymentEvent]]:
    """Normalize all three streams at once, preserving order."""
    return (
        [normalize_sale(r, i) for i, r in enumerate(sales)],
        [normalize_debt(r, i) for i, r in enumerate(debts)],
        [normalize_payment(r, i) for i, r in enumerate(payments)],
    )
