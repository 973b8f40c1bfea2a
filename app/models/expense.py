from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ExpenseInDB(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str
    amount: float
    category: str
    note: Optional[str] = None
    date: str  # YYYY-MM-DD
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)


class ExpensePublic(BaseModel):
    id: str
    user_id: str
    amount: float
    category: str
    note: Optional[str] = None
    date: str
    created_at: str
    updated_at: str
