import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from app.core.errors import AppError, ErrorKind
from app.core.security import get_current_user_id
from app.db import dynamo
from app.models.expense import ExpenseInDB, ExpensePublic, utc_now_iso
from app.utils.validation import (
    EXPENSE_FIELDS,
    first_validation_error,
    has_validation_errors,
    merge_expense_update,
    validate_expense_input,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def raise_for_validation(errors: Dict[str, str]) -> None:
    if has_validation_errors(errors):
        raise AppError(ErrorKind.VALIDATION, first_validation_error(errors), details=errors)


def get_owned_expense(user_id: str, expense_id: str, action: str) -> Dict[str, Any]:
    expense = dynamo.get_expense(user_id, expense_id)
    if not expense:
        raise AppError(
            ErrorKind.NOT_FOUND,
            f"Expense not found or you do not have permission to {action} it",
        )
    return expense


@router.get("/", response_model=List[ExpensePublic])
def list_expenses(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: str = Depends(get_current_user_id),
):
    """Expenses for the current user, newest first, optionally bounded by date."""
    return dynamo.list_expenses(user_id, start_date, end_date)


@router.post("/", response_model=ExpensePublic, status_code=status.HTTP_201_CREATED)
def create_expense(
    body: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
):
    raise_for_validation(validate_expense_input(body))

    expense_db = ExpenseInDB(
        user_id=user_id,
        amount=body["amount"],
        category=body["category"],
        note=body.get("note") or None,
        date=body["date"],
    )
    dynamo.put_expense(expense_db.model_dump())
    logger.info(f"Created expense {expense_db.id} for user {user_id}")
    return ExpensePublic(**expense_db.model_dump())


@router.put("/{expense_id}", response_model=ExpensePublic)
def update_expense(
    expense_id: str,
    body: Dict[str, Any] = Body(...),
    user_id: str = Depends(get_current_user_id),
):
    existing = get_owned_expense(user_id, expense_id, "update")

    candidate = merge_expense_update(existing, body)
    raise_for_validation(validate_expense_input(candidate))

    mutable_fields = {field: body[field] for field in EXPENSE_FIELDS if field in body}
    mutable_fields["updated_at"] = utc_now_iso()

    updated = dynamo.update_expense(user_id, expense_id, mutable_fields)
    if not updated:
        raise AppError(ErrorKind.NOT_FOUND, "Expense not found")
    return ExpensePublic(**updated)


@router.delete("/{expense_id}")
def delete_expense(expense_id: str, user_id: str = Depends(get_current_user_id)):
    get_owned_expense(user_id, expense_id, "delete")
    if not dynamo.delete_expense(user_id, expense_id):
        raise AppError(ErrorKind.NOT_FOUND, "Expense not found")
    return {"message": "Expense deleted successfully", "success": True}
