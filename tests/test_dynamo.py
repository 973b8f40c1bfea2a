from decimal import Decimal

import pytest
from botocore.exceptions import ClientError

from app.core.errors import AppError, ErrorKind
from app.db import dynamo


class FakeTable:
    def __init__(self, pages=None, error_code=None, message="boom"):
        self.pages = list(pages or [])
        self.error_code = error_code
        self.message = message
        self.calls = []

    def _maybe_fail(self, operation):
        if self.error_code:
            raise ClientError({"Error": {"Code": self.error_code, "Message": self.message}}, operation)

    def query(self, **kwargs):
        self.calls.append(kwargs)
        self._maybe_fail("Query")
        return self.pages.pop(0)

    def put_item(self, **kwargs):
        self.calls.append(kwargs)
        self._maybe_fail("PutItem")
        return {}

    def update_item(self, **kwargs):
        self.calls.append(kwargs)
        self._maybe_fail("UpdateItem")
        return {"Attributes": {"id": "e1", "amount": Decimal("9.5")}}


def test_list_expenses_follows_pages_and_sorts(monkeypatch):
    table = FakeTable(pages=[
        {"Items": [{"id": "a", "date": "2024-03-01", "amount": Decimal("10")}], "LastEvaluatedKey": {"id": "a"}},
        {"Items": [{"id": "b", "date": "2024-03-05", "amount": Decimal("2.5")}]},
    ])
    monkeypatch.setattr(dynamo, "expenses_table", table)

    expenses = dynamo.list_expenses("u1", start_date="2024-03-01", end_date="2024-03-31")

    assert [e["id"] for e in expenses] == ["b", "a"]
    assert expenses[0]["amount"] == 2.5
    assert expenses[1]["amount"] == 10
    assert "FilterExpression" in table.calls[0]
    assert table.calls[1]["ExclusiveStartKey"] == {"id": "a"}


def test_put_expense_converts_floats(monkeypatch):
    table = FakeTable()
    monkeypatch.setattr(dynamo, "expenses_table", table)
    dynamo.put_expense({"id": "e1", "amount": 12.3})
    assert table.calls[0]["Item"]["amount"] == Decimal("12.3")


def test_client_errors_are_classified(monkeypatch):
    monkeypatch.setattr(dynamo, "expenses_table", FakeTable(error_code="InternalServerError", message="connection lost"))
    with pytest.raises(AppError) as exc_info:
        dynamo.list_expenses("u1")
    assert exc_info.value.kind is ErrorKind.DATABASE
    assert exc_info.value.status_code == 503
    assert exc_info.value.retryable is True


def test_update_of_vanished_expense_returns_none(monkeypatch):
    monkeypatch.setattr(dynamo, "expenses_table", FakeTable(error_code="ConditionalCheckFailedException"))
    assert dynamo.update_expense("u1", "e1", {"amount": 3}) is None


def test_update_expense_builds_expression(monkeypatch):
    table = FakeTable()
    monkeypatch.setattr(dynamo, "expenses_table", table)
    updated = dynamo.update_expense("u1", "e1", {"amount": 9.5, "note": "x"})
    assert updated == {"id": "e1", "amount": 9.5}
    call = table.calls[0]
    assert call["UpdateExpression"] == "SET #f0 = :v0, #f1 = :v1"
    assert call["ExpressionAttributeNames"] == {"#f0": "amount", "#f1": "note"}
    assert call["ExpressionAttributeValues"][":v0"] == Decimal("9.5")
