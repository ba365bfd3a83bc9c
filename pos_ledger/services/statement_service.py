"""
Customer statements.

Turns ledger rows (most recent first, as returned by
build_history) into a CSV export or a printable HTML page. Both
formats share the same columns:

    Date | Previous Debt | Amount | Method/Reason | Remaining Balance | Notes
"""

import csv
import io
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from jinja2 import Environment, PackageLoader, select_autoescape

from pos_ledger.config import get_settings
from pos_ledger.services.ledger_engine import LedgerRow, ZERO

STATEMENT_COLUMNS = [
    "Date",
    "Previous Debt",
    "Amount",
    "Method/Reason",
    "Remaining Balance",
    "Notes",
]
MONEY_COLUMNS = {"Previous Debt", "Amount", "Remaining Balance"}


def format_label(label: str | None) -> str:
    return (label or "").replace("_", " ").upper()


def format_date(timestamp: datetime | None) -> str:
    if timestamp is None:
        return ""
    return timestamp.strftime("%Y-%m-%d")


def format_amount(value: Decimal) -> str:
    return f"{value:.2f}"


def format_money(value: Decimal) -> str:
    return f"{get_settings().CURRENCY_SYMBOL}{value:.2f}"


def balance_class(value: Decimal) -> str:
    """Outstanding debt prints red; settled or in credit prints green."""
    return "red" if value > 0 else "green"


_env = Environment(
    loader=PackageLoader("pos_ledger", "templates"),
    autoescape=select_autoescape(["html"]),
)
_env.filters["money"] = format_money
_env.filters["label"] = format_label
_env.filters["statement_date"] = format_date
_env.filters["balance_class"] = balance_class


def statement_row(row: LedgerRow) -> list[str]:
    """One ledger row as the six statement cells."""
    return [
        format_date(row.timestamp),
        format_amount(row.balance_before),
        format_amount(row.amount),
        format_label(row.label),
        format_amount(row.balance_after),
        row.notes or "-",
    ]


def render_csv(rows: Sequence[LedgerRow]) -> str:
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(STATEMENT_COLUMNS)
    for row in rows:
        writer.writerow(statement_row(row))
    return output.getvalue()


def render_html(
    customer_name: str,
    rows: Sequence[LedgerRow],
    balance: Decimal | None = None,
) -> str:
    """
    Render a printable statement.

    rows are expected most recent first; when balance is not
    given it is read from the newest row.
    """
    if balance is None:
        balance = rows[0].balance_after if rows else ZERO

    template = _env.get_template("statement.html")
    return template.render(
        title=f"Payment History - {customer_name}",
        balance=balance,
        columns=STATEMENT_COLUMNS,
        money_columns=MONEY_COLUMNS,
        rows=rows,
    )
