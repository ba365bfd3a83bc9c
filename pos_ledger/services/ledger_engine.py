"""
Customer ledger engine.

Reconciles a customer's three event streams (sales, manual debts
and payments) into:
1. An outstanding balance: sales + debts - payments
2. A running-balance transaction history, most recent first

The engine is a pure computation. It holds no state, never
mutates the events it is given and never touches the database.
Every call recomputes the ledger from scratch, so the result is
always consistent with the events passed in.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Iterable, Union

from pos_ledger.models.enums import EventKind

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

# Numeric(19, 4) holds at most 15 integer digits.
MAX_ADJUSTED_EXPONENT = 14

# Raw amounts as they come out of storage. Anything that is not a
# finite, non-negative number is read as zero.
Amount = Union[Decimal, int, float, str, None]

# Events sharing a timestamp are applied sale, then debt, then payment.
KIND_ORDER: dict[EventKind, int] = {
    EventKind.SALE: 0,
    EventKind.DEBT: 1,
    EventKind.PAYMENT: 2,
}


# --- Input events ---

@dataclass(frozen=True)
class SaleEvent:
    """A sale. No customer_id means a walk-in sale."""
    id: str
    customer_id: str | None
    total: Amount
    timestamp: datetime | None
    payment_method: str | None = None
    notes: str = ""


@dataclass(frozen=True)
class DebtEvent:
    """Credit extended to a customer outside of a sale."""
    id: str
    customer_id: str | None
    amount: Amount
    reason: str | None
    timestamp: datetime | None
    notes: str = ""


@dataclass(frozen=True)
class PaymentEvent:
    """Money received from a customer against their balance."""
    id: str
    customer_id: str | None
    amount: Amount
    method: str | None
    timestamp: datetime | None
    notes: str = ""


# --- Output ---

@dataclass(frozen=True)
class LedgerRow:
    """
    One reconciled transaction with its running balance.

    balance_after is always balance_before + signed_amount.
    """
    id: str
    timestamp: datetime | None
    kind: EventKind
    signed_amount: Decimal
    balance_before: Decimal
    balance_after: Decimal
    label: str
    notes: str = ""

    @property
    def amount(self) -> Decimal:
        """Unsigned amount, as printed on statements."""
        return abs(self.signed_amount)


@dataclass(frozen=True)
class _TaggedEvent:
    id: str
    timestamp: datetime | None
    kind: EventKind
    signed_amount: Decimal
    label: str
    notes: str
    sequence: int


def coerce_amount(value: Amount, *, event_id: str = "?") -> Decimal:
    """
    Read a stored amount as a non-negative Decimal.

    Missing, non-numeric, non-finite, negative and unstorably
    large values become zero so that one bad record cannot abort
    a whole ledger.
    """
    if value is None:
        return ZERO
    if isinstance(value, bool):
        logger.warning("Event %s has a boolean amount; treating as 0", event_id)
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        logger.warning(
            "Event %s has a non-numeric amount %r; treating as 0",
            event_id, value,
        )
        return ZERO
    if not amount.is_finite() or amount < 0:
        logger.warning(
            "Event %s has an invalid amount %s; treating as 0",
            event_id, amount,
        )
        return ZERO
    if amount and amount.adjusted() > MAX_ADJUSTED_EXPONENT:
        logger.warning(
            "Event %s has an out of range amount %s; treating as 0",
            event_id, amount,
        )
        return ZERO
    return amount


def _label_value(value) -> str | None:
    # Enum members carry their wire value in .value
    value = getattr(value, "value", value)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _sale_label(sale: SaleEvent) -> str:
    return _label_value(sale.payment_method) or "SALE"


def _debt_label(debt: DebtEvent) -> str:
    reason = _label_value(debt.reason)
    if reason is None:
        return "DEBT - MANUAL"
    return f"DEBT - {reason.replace('_', ' ')}"


def _payment_label(payment: PaymentEvent) -> str:
    return _label_value(payment.method) or "PAYMENT"


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC, the stored convention."""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _sort_instant(timestamp) -> datetime | None:
    # Anything that is not a datetime counts as missing.
    if not isinstance(timestamp, datetime):
        return None
    return to_naive_utc(timestamp)


def _sort_key(event: _TaggedEvent) -> tuple:
    instant = _sort_instant(event.timestamp)
    if instant is None:
        # Undated events follow every dated one, in insertion order.
        return (1, datetime.min, 0, event.sequence)
    return (0, instant, KIND_ORDER[event.kind], event.sequence)


class CustomerLedgerEngine:
    """
    Stateless reconciliation of sales, debts and payments.

    All methods take the three event collections explicitly.
    The collections may be any iterables (including empty ones)
    and may contain events for other customers, which are
    filtered out.
    """

    def compute_balance(
        self,
        customer_id: str,
        sales: Iterable[SaleEvent] = (),
        debts: Iterable[DebtEvent] = (),
        payments: Iterable[PaymentEvent] = (),
    ) -> Decimal:
        """
        Return what the customer currently owes.

        Pure summation, so the result does not depend on event
        order or timestamps. A negative result is store credit
        (the customer overpaid); it is never clamped.
        """
        return self.compute_balances(
            [customer_id], sales, debts, payments
        ).get(customer_id, ZERO)

    def compute_balances(
        self,
        customer_ids: Iterable[str],
        sales: Iterable[SaleEvent] = (),
        debts: Iterable[DebtEvent] = (),
        payments: Iterable[PaymentEvent] = (),
    ) -> dict[str, Decimal]:
        """
        Return the balance of every given customer in one pass.

        Events referencing a customer that is not in customer_ids
        (or no customer at all) are ignored.
        """
        balances = {cid: ZERO for cid in customer_ids if cid is not None}

        for sale in sales:
            if sale.customer_id in balances:
                balances[sale.customer_id] += coerce_amount(
                    sale.total, event_id=sale.id
                )
        for debt in debts:
            if debt.customer_id in balances:
                balances[debt.customer_id] += coerce_amount(
                    debt.amount, event_id=debt.id
                )
        for payment in payments:
            if payment.customer_id in balances:
                balances[payment.customer_id] -= coerce_amount(
                    payment.amount, event_id=payment.id
                )

        return balances

    def build_chronological(
        self,
        customer_id: str,
        sales: Iterable[SaleEvent] = (),
        debts: Iterable[DebtEvent] = (),
        payments: Iterable[PaymentEvent] = (),
    ) -> list[LedgerRow]:
        """
        Return the customer's ledger rows, oldest first.

        Rows are ordered by timestamp; equal timestamps resolve
        sale < debt < payment and then by insertion order. The
        first row starts from a zero balance.
        """
        tagged = self._tag_events(customer_id, sales, debts, payments)
        tagged.sort(key=_sort_key)

        rows = []
        running = ZERO
        for event in tagged:
            before = running
            running = running + event.signed_amount
            rows.append(LedgerRow(
                id=event.id,
                timestamp=event.timestamp,
                kind=event.kind,
                signed_amount=event.signed_amount,
                balance_before=before,
                balance_after=running,
                label=event.label,
                notes=event.notes,
            ))
        return rows

    def build_history(
        self,
        customer_id: str,
        sales: Iterable[SaleEvent] = (),
        debts: Iterable[DebtEvent] = (),
        payments: Iterable[PaymentEvent] = (),
    ) -> list[LedgerRow]:
        """
        Return the customer's ledger rows, most recent first.

        Running balances are computed on the chronological order
        and only then reversed for presentation.
        """
        rows = self.build_chronological(customer_id, sales, debts, payments)
        rows.reverse()
        return rows

    def _tag_events(
        self,
        customer_id: str,
        sales: Iterable[SaleEvent],
        debts: Iterable[DebtEvent],
        payments: Iterable[PaymentEvent],
    ) -> list[_TaggedEvent]:
        """
        Filter the three streams to one customer and sign them.

        Every event gets a sequence number: its index within its
        own stream offset by the length of the streams before it.
        This keeps the sort total even without timestamps.
        """
        if customer_id is None:
            return []

        tagged: list[_TaggedEvent] = []

        def add(event_id, timestamp, kind, signed_amount, label, notes):
            tagged.append(_TaggedEvent(
                id=str(event_id) if event_id is not None else f"{kind.value}-{len(tagged)}",
                timestamp=timestamp,
                kind=kind,
                signed_amount=signed_amount,
                label=label,
                notes=str(notes) if notes is not None else "",
                sequence=len(tagged),
            ))

        for sale in sales:
            if sale.customer_id == customer_id:
                add(
                    sale.id, sale.timestamp, EventKind.SALE,
                    coerce_amount(sale.total, event_id=sale.id),
                    _sale_label(sale), sale.notes,
                )
        for debt in debts:
            if debt.customer_id == customer_id:
                add(
                    debt.id, debt.timestamp, EventKind.DEBT,
                    coerce_amount(debt.amount, event_id=debt.id),
                    _debt_label(debt), debt.notes,
                )
        for payment in payments:
            if payment.customer_id == customer_id:
                add(
                    payment.id, payment.timestamp, EventKind.PAYMENT,
                    -coerce_amount(payment.amount, event_id=payment.id),
                    _payment_label(payment), payment.notes,
                )

        return tagged
