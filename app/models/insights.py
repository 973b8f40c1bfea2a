from typing import Any, Dict, List

from pydantic import BaseModel


class InsightsRequest(BaseModel):
    expenses: List[Dict[str, Any]] = []


class InsightsData(BaseModel):
    insights: str
    generated_at: str


class InsightsResponse(BaseModel):
    data: InsightsData
    message: str
