# File: expense_tracker/services/expense_service.py

"""
Expense persistence operations.

Every operation is scoped to the owning user: an expense that belongs to
someone else is reported exactly like one that does not exist.
"""

import math
from typing import List, Tuple

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from expense_tracker.core.errors import ConflictFailure, NotFoundFailure, ValidationFailure
from expense_tracker.models.expense import Expense
from expense_tracker.models.user import User
from expense_tracker.schemas.expense import ExpenseCreate, ExpensePatch

logger = structlog.get_logger(__name__)

NOT_FOUND_DETAIL = "Expense not found or access denied"

SORT_FIELDS = {
    "entry_date": Expense.entry_date,
    "amount": Expense.amount,
    "description": Expense.description,
    "category": Expense.category,
    "created_at": Expense.created_at,
    "updated_at": Expense.updated_at,
    "expense_id": Expense.expense_id,
}
SORT_DIRECTIONS = ("ASC", "DESC")


def total_pages(total: int, size: int) -> int:
    return math.ceil(total / size) if size else 0


def list_expenses(
    db: Session,
    owner: User,
    *,
    page: int = 0,
    size: int = 5,
    sort: str = "entry_date",
    direction: str = "DESC",
) -> Tuple[List[Expense], int]:
    """
    Return one page of the owner's expenses and the owner's total count.

    ``page`` is zero-based. Ties on the sort column are broken by id in the
    same direction so paging is stable.
    """
    column = SORT_FIELDS.get(sort)
    if column is None:
        raise ValidationFailure(
            f"Cannot sort by '{sort}'. Allowed: {', '.join(sorted(SORT_FIELDS))}"
        )
    direction = direction.upper()
    if direction not in SORT_DIRECTIONS:
        raise ValidationFailure("Sort direction must be ASC or DESC")
    if page < 0 or size < 1:
        raise ValidationFailure("Page must be >= 0 and size >= 1")

    if direction == "DESC":
        order = (column.desc(), Expense.expense_id.desc())
    else:
        order = (column.asc(), Expense.expense_id.asc())

    owned = Expense.user_id == owner.user_id
    total = db.scalar(select(func.count()).select_from(Expense).where(owned)) or 0
    stmt = select(Expense).where(owned).order_by(*order).offset(page * size).limit(size)
    return list(db.scalars(stmt)), total


def get_expense(db: Session, owner: User, expense_id: int) -> Expense:
    stmt = select(Expense).where(
        Expense.expense_id == expense_id,
        Expense.user_id == owner.user_id,
    )
    expense = db.scalars(stmt).first()
    if expense is None:
        raise NotFoundFailure(NOT_FOUND_DETAIL)
    return expense


def _flush(db: Session) -> None:
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictFailure("Expense violates a data constraint") from exc


def create_expense(db: Session, owner: User, payload: ExpenseCreate) -> Expense:
    expense = Expense(**payload.model_dump(), user_id=owner.user_id)
    db.add(expense)
    _flush(db)
    db.refresh(expense)
    logger.info("expense_created", expense_id=expense.expense_id, user_id=owner.user_id)
    return expense


def update_expense(db: Session, owner: User, expense_id: int, patch: ExpensePatch) -> Expense:
    expense = get_expense(db, owner, expense_id)
    changes = patch.changes()
    for field, value in changes.items():
        setattr(expense, field, value)
    _flush(db)
    db.refresh(expense)
    logger.info(
        "expense_updated",
        expense_id=expense.expense_id,
        user_id=owner.user_id,
        fields=sorted(changes),
    )
    return expense


def delete_expense(db: Session, owner: User, expense_id: int) -> None:
    expense = get_expense(db, owner, expense_id)
    db.delete(expense)
    _flush(db)
    logger.info("expense_deleted", expense_id=expense_id, user_id=owner.user_id)
