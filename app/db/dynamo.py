import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import ClientError

from app.core.config import settings
from app.core.errors import classify_database_error

logger = logging.getLogger(__name__)

# Initialize DynamoDB resource
dynamodb = boto3.resource("dynamodb", region_name=settings.DYNAMO_REGION)

# Get table references
users_table = dynamodb.Table(settings.DYNAMO_USERS_TABLE)
expenses_table = dynamodb.Table(settings.DYNAMO_EXPENSES_TABLE)
profiles_table = dynamodb.Table(settings.DYNAMO_PROFILES_TABLE)


def _fail(operation: str, error: ClientError):
    logger.error(f"{operation} failed: {error.response.get('Error', {}).get('Message', str(error))}")
    return classify_database_error(error)


# Users

def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    """Query the Users table by email (assumes a GSI exists on email)."""
    try:
        response = users_table.query(
            IndexName="email-index",
            KeyConditionExpression=Key("email").eq(email),
        )
    except ClientError as e:
        raise _fail("get_user_by_email", e)
    items = response.get("Items", [])
    return _from_dynamo(items[0]) if items else None


def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    try:
        response = users_table.get_item(Key={"user_id": user_id})
    except ClientError as e:
        raise _fail("get_user_by_id", e)
    item = response.get("Item")
    return _from_dynamo(item) if item else None


def put_user(user_item: dict) -> None:
    """Insert a new user; fails if the user_id is already taken."""
    try:
        users_table.put_item(
            Item=_convert_for_dynamo(user_item),
            ConditionExpression=Attr("user_id").not_exists(),
        )
    except ClientError as e:
        raise _fail("put_user", e)


def delete_user(user_id: str) -> None:
    try:
        users_table.delete_item(Key={"user_id": user_id})
    except ClientError as e:
        raise _fail("delete_user", e)


# Expenses

def put_expense(expense_item: dict) -> Dict[str, Any]:
    try:
        expenses_table.put_item(Item=_convert_for_dynamo(expense_item))
    except ClientError as e:
        raise _fail("put_expense", e)
    return expense_item


def get_expense(user_id: str, expense_id: str) -> Optional[Dict[str, Any]]:
    """Fetch a single expense owned by user_id."""
    try:
        response = expenses_table.get_item(Key={"user_id": user_id, "id": expense_id})
    except ClientError as e:
        raise _fail("get_expense", e)
    item = response.get("Item")
    return _from_dynamo(item) if item else None


def list_expenses(
    user_id: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    All expenses for a user, newest date first.
    start_date / end_date are inclusive YYYY-MM-DD bounds.
    """
    query_kwargs: Dict[str, Any] = {"KeyConditionExpression": Key("user_id").eq(user_id)}

    date_filter = None
    if start_date:
        date_filter = Attr("date").gte(start_date)
    if end_date:
        upper = Attr("date").lte(end_date)
        date_filter = upper if date_filter is None else date_filter & upper
    if date_filter is not None:
        query_kwargs["FilterExpression"] = date_filter

    items: List[Dict[str, Any]] = []
    try:
        while True:
            response = expenses_table.query(**query_kwargs)
            items.extend(response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            query_kwargs["ExclusiveStartKey"] = last_key
    except ClientError as e:
        raise _fail("list_expenses", e)

    expenses = [_from_dynamo(item) for item in items]
    return sorted(expenses, key=lambda exp: exp.get("date", ""), reverse=True)


def update_expense(user_id: str, expense_id: str, updates: dict) -> Optional[Dict[str, Any]]:
    """
    Apply partial updates to an existing expense. Returns the updated item.
    """
    if not updates:
        return get_expense(user_id, expense_id)

    update_expression_parts = []
    expression_attribute_values = {}
    expression_attribute_names = {}

    for idx, (key, value) in enumerate(updates.items()):
        placeholder = f"#f{idx}"
        value_placeholder = f":v{idx}"
        update_expression_parts.append(f"{placeholder} = {value_placeholder}")
        expression_attribute_names[placeholder] = key
        expression_attribute_values[value_placeholder] = value

    try:
        response = expenses_table.update_item(
            Key={"user_id": user_id, "id": expense_id},
            UpdateExpression="SET " + ", ".join(update_expression_parts),
            ConditionExpression=Attr("id").exists(),
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=_convert_for_dynamo(expression_attribute_values),
            ReturnValues="ALL_NEW",
        )
    except ClientError as e:
        # expense was deleted between the ownership check and this write
        if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
            return None
        raise _fail("update_expense", e)
    attributes = response.get("Attributes")
    return _from_dynamo(attributes) if attributes else None


def delete_expense(user_id: str, expense_id: str) -> bool:
    """Delete a specific expense item. Returns False when nothing was deleted."""
    try:
        response = expenses_table.delete_item(
            Key={"user_id": user_id, "id": expense_id},
            ReturnValues="ALL_OLD",
        )
    except ClientError as e:
        raise _fail("delete_expense", e)
    return "Attributes" in response


def delete_expenses_for_user(user_id: str) -> int:
    expenses = list_expenses(user_id)
    try:
        with expenses_table.batch_writer() as batch:
            for expense in expenses:
                batch.delete_item(Key={"user_id": user_id, "id": expense["id"]})
    except ClientError as e:
        raise _fail("delete_expenses_for_user", e)
    return len(expenses)


# Profiles

def get_profile(user_id: str) -> Optional[Dict[str, Any]]:
    try:
        response = profiles_table.get_item(Key={"id": user_id})
    except ClientError as e:
        raise _fail("get_profile", e)
    item = response.get("Item")
    return _from_dynamo(item) if item else None


def put_profile(profile_item: dict) -> Dict[str, Any]:
    try:
        profiles_table.put_item(Item=_convert_for_dynamo(profile_item))
    except ClientError as e:
        raise _fail("put_profile", e)
    return profile_item


def update_profile(user_id: str, updates: dict) -> Optional[Dict[str, Any]]:
    names = {f"#f{idx}": key for idx, key in enumerate(updates)}
    values = {f":v{idx}": value for idx, value in enumerate(updates.values())}
    expression = "SET " + ", ".join(f"#f{idx} = :v{idx}" for idx in range(len(updates)))
    try:
        response = profiles_table.update_item(
            Key={"id": user_id},
            UpdateExpression=expression,
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=_convert_for_dynamo(values),
            ReturnValues="ALL_NEW",
        )
    except ClientError as e:
        raise _fail("update_profile", e)
    attributes = response.get("Attributes")
    return _from_dynamo(attributes) if attributes else None


def delete_profile(user_id: str) -> None:
    try:
        profiles_table.delete_item(Key={"id": user_id})
    except ClientError as e:
        raise _fail("delete_profile", e)


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj
