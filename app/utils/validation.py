"""
Input validation for expenses and profiles.

Each validator returns a dict mapping field name to message; an empty dict
means the input is valid. Insertion order decides which error is shown first.
"""
import math
import re
from datetime import date
from numbers import Real
from typing import Any, Dict, Mapping, Optional

EXPENSE_CATEGORIES = (
    "Food & Dining",
    "Transportation",
    "Shopping",
    "Entertainment",
    "Bills & Utilities",
    "Healthcare",
    "Education",
    "Travel",
    "Personal Care",
    "Other",
)

EXPENSE_FIELDS = ("amount", "category", "date", "note")

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
CURRENCY_PATTERN = re.compile(r"[A-Z]{3}")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

MAX_NAME_LENGTH = 100
MIN_PASSWORD_LENGTH = 6

ValidationErrors = Dict[str, str]


def _validate_amount(amount: Any) -> Optional[str]:
    if amount is None:
        return "Amount is required"
    if isinstance(amount, bool) or not isinstance(amount, Real):
        return "Amount must be a number"
    if not math.isfinite(amount):
        return "Amount must be a valid number"
    if amount <= 0:
        return "Amount must be greater than 0"
    return None


def _validate_category(category: Any) -> Optional[str]:
    if not category:
        return "Category is required"
    if not isinstance(category, str):
        return "Category must be a string"
    if category not in EXPENSE_CATEGORIES:
        return "Invalid category"
    return None


def _validate_date(value: Any) -> Optional[str]:
    if not value:
        return "Date is required"
    if not isinstance(value, str):
        return "Date must be a string"
    if not DATE_PATTERN.fullmatch(value):
        return "Date must be in YYYY-MM-DD format"
    try:
        date.fromisoformat(value)
    except ValueError:
        return "Invalid date"
    return None


def validate_expense_input(data: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}

    message = _validate_amount(data.get("amount"))
    if message:
        errors["amount"] = message

    message = _validate_category(data.get("category"))
    if message:
        errors["category"] = message

    message = _validate_date(data.get("date"))
    if message:
        errors["date"] = message

    note = data.get("note")
    if note is not None and not isinstance(note, str):
        errors["note"] = "Note must be a string"

    return errors


def merge_expense_update(existing: Mapping[str, Any], updates: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Build the complete record an update would produce.

    Fields present in `updates` win (even when null); everything else keeps the
    stored value. The result is what gets validated.
    """
    candidate = {field: existing.get(field) for field in EXPENSE_FIELDS}
    for field in EXPENSE_FIELDS:
        if field in updates:
            candidate[field] = updates[field]
    return candidate


def normalize_currency(value: str) -> str:
    return value.upper().strip()


def validate_profile_data(data: Mapping[str, Any]) -> ValidationErrors:
    errors: ValidationErrors = {}

    name = data.get("name")
    if name is not None:
        if not isinstance(name, str):
            errors["name"] = "Name must be a string"
        elif len(name.strip()) > MAX_NAME_LENGTH:
            errors["name"] = f"Name must be less than {MAX_NAME_LENGTH} characters"

    currency = data.get("preferred_currency")
    if currency is not None:
        if not isinstance(currency, str):
            errors["preferred_currency"] = "Currency must be a string"
        else:
            currency = normalize_currency(currency)
            if len(currency) != 3:
                errors["preferred_currency"] = "Currency must be a 3-letter code (e.g., USD, EUR)"
            elif not CURRENCY_PATTERN.fullmatch(currency):
                errors["preferred_currency"] = "Currency must contain only letters"

    return errors


def validate_email(email: str) -> bool:
    return bool(email) and EMAIL_PATTERN.fullmatch(email) is not None


def validate_password(password: str) -> Dict[str, Any]:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return {
            "valid": False,
            "message": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
        }
    return {"valid": True}


def has_validation_errors(errors: ValidationErrors) -> bool:
    return len(errors) > 0


def first_validation_error(errors: ValidationErrors) -> Optional[str]:
    return next(iter(errors.values()), None)
