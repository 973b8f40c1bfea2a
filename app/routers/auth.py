import logging

from fastapi import APIRouter, Depends

from app.core.errors import AppError, ErrorKind
from app.core.security import (
    create_access_token,
    get_current_user_id,
    get_password_hash,
    verify_password,
)
from app.db import dynamo
from app.models.user import UserCreate, UserInDB, UserLogin, UserPublic
from app.utils.validation import validate_email, validate_password

router = APIRouter()
logger = logging.getLogger(__name__)

INVALID_EMAIL_MESSAGE = "Please enter a valid email address"


@router.post("/register", response_model=UserPublic)
def register(user: UserCreate):
    if not validate_email(user.email):
        raise AppError(ErrorKind.VALIDATION, INVALID_EMAIL_MESSAGE)

    password_check = validate_password(user.password)
    if not password_check["valid"]:
        raise AppError(ErrorKind.VALIDATION, password_check["message"])

    if dynamo.get_user_by_email(user.email):
        raise AppError(ErrorKind.VALIDATION, "User already exists")

    user_db = UserInDB(
        email=user.email,
        name=user.name,
        password_hash=get_password_hash(user.password),
    )
    dynamo.put_user(user_db.model_dump())
    logger.info(f"Registered user {user_db.user_id}")
    return UserPublic(**user_db.model_dump())


@router.post("/login")
def login(login_data: UserLogin):
    if not validate_email(login_data.email):
        raise AppError(ErrorKind.VALIDATION, INVALID_EMAIL_MESSAGE)
    logger.info(f"Login attempt for email: {login_data.email}")
    user = dynamo.get_user_by_email(login_data.email)

    if not user or not verify_password(login_data.password, user["password_hash"]):
        logger.warning(f"Invalid credentials for: {login_data.email}")
        raise AppError(ErrorKind.AUTHENTICATION, "Invalid credentials")

    access_token = create_access_token(data={"sub": user["user_id"]})
    user_public = UserPublic(
        user_id=user["user_id"],
        email=user["email"],
        created_at=user.get("created_at", ""),
    )
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": user_public.model_dump(),
    }


@router.post("/logout")
def logout(user_id: str = Depends(get_current_user_id)):
    # Tokens are stateless; the client discards its copy
    logger.info(f"User {user_id} logged out")
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserPublic)
def get_current_user(user_id: str = Depends(get_current_user_id)):
    user = dynamo.get_user_by_id(user_id)
    if not user:
        raise AppError(ErrorKind.NOT_FOUND, "User not found")
    return UserPublic(
        user_id=user["user_id"],
        email=user["email"],
        created_at=user.get("created_at", ""),
    )
