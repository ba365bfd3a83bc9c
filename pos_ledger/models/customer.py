"""
Customer model.

A customer is referenced by id from sales, debts and payments.
Their balance is never stored here; it is derived from those
three event streams by the ledger engine.
"""

import uuid
from datetime import datetime

from sqlalchemy import String, DateTime
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_ledger.models.base import Base


def generate_customer_id() -> str:
    return f"cust-{uuid.uuid4().hex[:12]}"


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(
        String(64), primary_key=True, default=generate_customer_id
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(
        String(255), unique=True, nullable=True
    )
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    sales: Mapped[list["Sale"]] = relationship(back_populates="customer")
    debts: Mapped[list["Debt"]] = relationship(back_populates="customer")
    payments: Mapped[list["Payment"]] = relationship(back_populates="customer")

    def __repr__(self) -> str:
        return f"<Customer {self.id} {self.name}>"
