from datetime import timedelta

import pytest

from app.core.config import Settings, verify_settings
from app.core.errors import AppError, ErrorKind
from app.core.security import (
    create_access_token,
    decode_access_token,
    get_current_user_id,
    get_password_hash,
    verify_password,
)


def test_password_hash_roundtrip():
    password_hash = get_password_hash("hunter22")
    assert verify_password("hunter22", password_hash)
    assert not verify_password("hunter23", password_hash)
    assert not verify_password("hunter22", "not-a-hash")


def test_expired_token_is_authentication_error():
    token = create_access_token({"sub": "u1"}, expires_delta=timedelta(seconds=-1))
    with pytest.raises(AppError) as exc_info:
        decode_access_token(token)
    assert exc_info.value.kind is ErrorKind.AUTHENTICATION
    assert exc_info.value.message == "Session expired. Please log in again."


def test_bearer_header_parsing():
    token = create_access_token({"sub": "u1"})
    assert get_current_user_id(f"Bearer {token}") == "u1"
    with pytest.raises(AppError):
        get_current_user_id(None)
    with pytest.raises(AppError):
        get_current_user_id("Bearer garbage")
    with pytest.raises(AppError):
        get_current_user_id(f"Bearer {create_access_token({'role': 'x'})}")


def test_verify_settings_reports_gaps():
    problems = verify_settings(Settings(GEMINI_API_KEY="", JWT_SECRET_KEY="s" * 40))
    assert problems == ["GEMINI_API_KEY is not set (Google Gemini API key (KEEP SECRET))"]
    assert verify_settings(Settings(GEMINI_API_KEY="k", JWT_SECRET_KEY="s" * 40)) == []
