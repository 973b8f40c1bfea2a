"""
Profile Router
Read, update and delete the current user's profile and account
"""
import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from app.core.config import settings
from app.core.errors import AppError, ErrorKind
from app.core.security import get_current_user_id
from app.db import dynamo
from app.models.expense import utc_now_iso
from app.models.profile import ProfileInDB, ProfilePublic
from app.utils.validation import (
    first_validation_error,
    has_validation_errors,
    normalize_currency,
    validate_profile_data,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_or_create_profile(user_id: str) -> Dict[str, Any]:
    """Profiles are created lazily the first time they are read."""
    profile = dynamo.get_profile(user_id)
    if profile:
        return profile

    user = dynamo.get_user_by_id(user_id) or {}
    new_profile = ProfileInDB(
        id=user_id,
        name=user.get("name"),
        preferred_currency=settings.DEFAULT_CURRENCY,
    )
    logger.info(f"Creating default profile for user {user_id}")
    return dynamo.put_profile(new_profile.model_dump())


@router.get("", response_model=ProfilePublic)
def get_profile(user_id: str = Depends(get_current_user_id)):
    return get_or_create_profile(user_id)


@router.put("", response_model=ProfilePublic)
def update_profile(body: Dict[str, Any] = Body(...), user_id: str = Depends(get_current_user_id)):
    errors = validate_profile_data(body)
    if has_validation_errors(errors):
        raise AppError(ErrorKind.VALIDATION, first_validation_error(errors), details=errors)

    updates: Dict[str, Any] = {}
    if body.get("name") is not None:
        updates["name"] = body["name"].strip() or None
    if body.get("preferred_currency") is not None:
        updates["preferred_currency"] = normalize_currency(body["preferred_currency"])

    if not updates:
        raise AppError(ErrorKind.VALIDATION, "No valid fields to update")

    get_or_create_profile(user_id)
    updates["updated_at"] = utc_now_iso()
    return dynamo.update_profile(user_id, updates)


@router.delete("")
def delete_account(user_id: str = Depends(get_current_user_id)):
    """Remove every expense, the profile and the user record."""
    removed = dynamo.delete_expenses_for_user(user_id)
    dynamo.delete_profile(user_id)
    dynamo.delete_user(user_id)
    logger.info(f"Deleted account {user_id} with {removed} expenses")
    return {"message": "Account deleted successfully"}
