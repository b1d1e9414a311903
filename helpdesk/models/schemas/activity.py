from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ActivityCreateRequest(BaseModel):
    content: str
    user_id: str | None = None


class ActivityRead(BaseModel):
    id: int
    ticket_id: str
    user_id: str | None = None
    author_name: str | None = None
    content: str
    created_at: datetime


class ActivityDataResponse(BaseModel):
    data: ActivityRead


class ActivityListResponse(BaseModel):
    data: list[ActivityRead]


class HistoryRead(BaseModel):
    id: int
    ticket_id: str
    user_id: str | None = None
    action: str
    details: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime


class HistoryListResponse(BaseModel):
    data: list[HistoryRead]
