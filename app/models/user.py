from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from app.models.expense import utc_now_iso


class UserCreate(BaseModel):
    email: str
    password: str
    name: Optional[str] = None


class UserLogin(BaseModel):
    email: str
    password: str


class UserInDB(BaseModel):
    user_id: str = Field(default_factory=lambda: str(uuid4()))
    email: str
    name: Optional[str] = None
    password_hash: str
    created_at: str = Field(default_factory=utc_now_iso)


class UserPublic(BaseModel):
    user_id: str
    email: str
    created_at: str
