"""
Sale model.

Only the fields the customer ledger needs are stored: who
bought (optional, walk-in sales have no customer), the total
and when it happened.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Numeric, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_ledger.models.base import Base


class Sale(Base):
    __tablename__ = "sales"

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_id: Mapped[str | None] = mapped_column(
        ForeignKey("customers.id"), nullable=True, index=True
    )
    total: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    payment_method: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    sale_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    customer: Mapped["Customer | None"] = relationship(back_populates="sales")

    def __repr__(self) -> str:
        return f"<Sale {self.id} {self.total} customer={self.customer_id}>"
