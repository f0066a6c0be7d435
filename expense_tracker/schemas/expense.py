# File: expense_tracker/schemas/expense.py

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, Field, StringConstraints

from expense_tracker.models.expense import DEFAULT_CATEGORY

CENTS = Decimal("0.01")

# UTC+14 is the earliest time zone; its calendar date is the latest "today".
_MAX_UTC_OFFSET = timedelta(hours=14)


def latest_valid_entry_date(now: Optional[datetime] = None) -> date:
    """
    Latest entry date accepted: today's date in the time zone furthest
    ahead of UTC, independent of the server's local zone.
    """
    now = now or datetime.now(timezone.utc)
    return (now.astimezone(timezone.utc) + _MAX_UTC_OFFSET).date()


def _not_in_future(value: date) -> date:
    if value > latest_valid_entry_date():
        raise ValueError("Entry date cannot be in the future")
    return value


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS)


Description = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=255)]
Category = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
# Up to 10 integer digits and 2 decimals.
Amount = Annotated[Decimal, Field(ge=CENTS, max_digits=12, decimal_places=2), AfterValidator(_to_cents)]
EntryDate = Annotated[date, AfterValidator(_not_in_future)]


# -----------------------------
# Requests
# -----------------------------

class ExpenseBase(BaseModel):
    description: Description
    amount: Amount
    category: Category = DEFAULT_CATEGORY
    entry_date: EntryDate


class ExpenseCreate(ExpenseBase):
    pass


class ExpensePatch(BaseModel):
    """
    Partial update. Omitted fields and explicit nulls leave the stored value
    untouched.
    """

    description: Optional[Description] = None
    amount: Optional[Amount] = None
    category: Optional[Category] = None
    entry_date: Optional[EntryDate] = None

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


# -----------------------------
# Responses
# -----------------------------

class ExpenseRead(BaseModel):
    expense_id: int
    user_id: int
    description: str
    amount: Decimal
    category: str
    entry_date: date
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ExpensePage(BaseModel):
    items: List[ExpenseRead]
    total: int
    page: int
    size: int
    total_pages: int
