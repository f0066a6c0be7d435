# File: expense_tracker/models/expense.py

"""
Expense model.

One row per spending entry, owned by exactly one user.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from expense_tracker.models.base import Base, utcnow

if TYPE_CHECKING:
    from expense_tracker.models.user import User

DEFAULT_CATEGORY = "general"


class Expense(Base):
    __tablename__ = "expenses"

    expense_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.user_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default=DEFAULT_CATEGORY)
    entry_date: Mapped[date] = mapped_column(Date, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    user: Mapped["User"] = relationship(back_populates="expenses")

    def __repr__(self) -> str:
        return (
            f"Expense(expense_id={self.expense_id!r}, user_id={self.user_id!r}, "
            f"amount={self.amount!r}, entry_date={self.entry_date!r})"
        )
