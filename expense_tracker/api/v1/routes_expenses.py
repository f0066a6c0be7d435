# File: expense_tracker/api/v1/routes_expenses.py

from fastapi import APIRouter, Depends, Path, Query, Response, status
from sqlalchemy.orm import Session

from expense_tracker.api.deps import get_current_user, get_db
from expense_tracker.core.config import settings
from expense_tracker.models.user import User
from expense_tracker.schemas.expense import ExpenseCreate, ExpensePage, ExpensePatch, ExpenseRead
from expense_tracker.services import expense_service

router = APIRouter()

# Keep ids and offsets inside the database integer range.
MAX_EXPENSE_ID = 2**31 - 1
MAX_PAGE = 10**9


@router.get("", response_model=ExpensePage, summary="List the current user's expenses")
def list_expenses(
    page: int = Query(0, ge=0, le=MAX_PAGE),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sort: str = Query("entry_date"),
    direction: str = Query("DESC"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    items, total = expense_service.list_expenses(
        db,
        current_user,
        page=page,
        size=size,
        sort=sort,
        direction=direction,
    )
    return ExpensePage(
        items=[ExpenseRead.model_validate(e) for e in items],
        total=total,
        page=page,
        size=size,
        total_pages=expense_service.total_pages(total, size),
    )


@router.post(
    "",
    response_model=ExpenseRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record a new expense",
)
def create_expense(
    payload: ExpenseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return expense_service.create_expense(db, current_user, payload)


@router.get("/{expense_id}", response_model=ExpenseRead, summary="Get one expense")
def get_expense(
    expense_id: int = Path(..., ge=1, le=MAX_EXPENSE_ID),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return expense_service.get_expense(db, current_user, expense_id)


@router.patch("/{expense_id}", response_model=ExpenseRead, summary="Partially update an expense")
def update_expense(
    patch: ExpensePatch,
    expense_id: int = Path(..., ge=1, le=MAX_EXPENSE_ID),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return expense_service.update_expense(db, current_user, expense_id, patch)


@router.delete(
    "/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete an expense",
)
def delete_expense(
    expense_id: int = Path(..., ge=1, le=MAX_EXPENSE_ID),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    expense_service.delete_expense(db, current_user, expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
