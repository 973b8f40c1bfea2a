import math

from app.utils.validation import (
    EXPENSE_CATEGORIES,
    first_validation_error,
    has_validation_errors,
    merge_expense_update,
    validate_email,
    validate_expense_input,
    validate_password,
    validate_profile_data,
)

valid_expense = {"amount": 12.5, "category": "Food & Dining", "date": "2024-03-01", "note": "lunch"}


def test_valid_expense_has_no_errors():
    assert validate_expense_input(valid_expense) == {}
    assert not has_validation_errors(validate_expense_input(valid_expense))


def test_missing_fields_reported_in_order():
    errors = validate_expense_input({})
    assert list(errors) == ["amount", "category", "date"]
    assert first_validation_error(errors) == "Amount is required"


def test_amount_rules():
    def amount_error(value):
        return validate_expense_input({**valid_expense, "amount": value}).get("amount")

    assert amount_error("12") == "Amount must be a number"
    assert amount_error(True) == "Amount must be a number"
    assert amount_error(0) == "Amount must be greater than 0"
    assert amount_error(-3) == "Amount must be greater than 0"
    assert amount_error(math.nan) == "Amount must be a valid number"
    assert amount_error(math.inf) == "Amount must be a valid number"
    assert amount_error(1) is None


def test_category_rules():
    assert validate_expense_input({**valid_expense, "category": "Rent"})["category"] == "Invalid category"
    assert validate_expense_input({**valid_expense, "category": 3})["category"] == "Category must be a string"
    for category in EXPENSE_CATEGORIES:
        assert "category" not in validate_expense_input({**valid_expense, "category": category})


def test_date_rules():
    def date_error(value):
        return validate_expense_input({**valid_expense, "date": value}).get("date")

    assert date_error("2024/03/01") == "Date must be in YYYY-MM-DD format"
    assert date_error("2024-03-01T10:00:00") == "Date must be in YYYY-MM-DD format"
    assert date_error("2024-02-30") == "Invalid date"
    assert date_error("2024-13-01") == "Invalid date"
    assert date_error(20240301) == "Date must be a string"
    assert date_error("2024-02-29") is None


def test_note_must_be_string_when_present():
    assert validate_expense_input({**valid_expense, "note": 5})["note"] == "Note must be a string"
    assert "note" not in validate_expense_input({**valid_expense, "note": None})


def test_first_error_follows_insertion_order():
    errors = validate_expense_input({"amount": 10, "category": "Nope", "date": "bad"})
    assert first_validation_error(errors) == "Invalid category"
    assert first_validation_error({}) is None


def test_merge_update_keeps_stored_values():
    existing = {"id": "e1", "amount": 20, "category": "Travel", "date": "2024-01-05", "note": "train"}
    candidate = merge_expense_update(existing, {"amount": 25})
    assert candidate == {"amount": 25, "category": "Travel", "date": "2024-01-05", "note": "train"}
    assert validate_expense_input(candidate) == {}


def test_merge_update_explicit_null_is_validated():
    existing = {"amount": 20, "category": "Travel", "date": "2024-01-05"}
    candidate = merge_expense_update(existing, {"amount": None})
    assert validate_expense_input(candidate) == {"amount": "Amount is required"}


def test_profile_rules():
    assert validate_profile_data({}) == {}
    assert validate_profile_data({"name": "  Ada  ", "preferred_currency": " eur "}) == {}
    assert validate_profile_data({"name": "x" * 101})["name"] == "Name must be less than 100 characters"
    assert validate_profile_data({"name": 7})["name"] == "Name must be a string"
    assert validate_profile_data({"preferred_currency": "US"})["preferred_currency"].startswith(
        "Currency must be a 3-letter code"
    )
    assert validate_profile_data({"preferred_currency": "U5D"})["preferred_currency"] == (
        "Currency must contain only letters"
    )


def test_email_and_password():
    assert validate_email("ada@example.com")
    assert not validate_email("ada@example")
    assert not validate_email("")
    assert validate_password("secret") == {"valid": True}
    assert validate_password("abc")["valid"] is False
