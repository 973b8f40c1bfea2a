from typing import Optional

from pydantic import BaseModel, Field

from app.models.expense import utc_now_iso


class ProfileInDB(BaseModel):
    id: str
    name: Optional[str] = None
    preferred_currency: str = "USD"
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)


class ProfilePublic(BaseModel):
    id: str
    name: Optional[str] = None
    preferred_currency: str
    created_at: str
    updated_at: str
