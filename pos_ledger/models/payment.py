"""
Customer payment model.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, ForeignKey, Text, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pos_ledger.models.base import Base
from pos_ledger.models.enums import PaymentMethod


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    customer_id: Mapped[str] = mapped_column(
        ForeignKey("customers.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod,
            name="payment_method_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=PaymentMethod.CASH,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    customer: Mapped["Customer"] = relationship(back_populates="payments")

    def __repr__(self) -> str:
        return f"<Payment {self.id} {self.amount} ({self.method.value})>"
