from typing import Literal

from pydantic import BaseModel

ReferenceKind = Literal["priority", "category", "assignee", "department", "role"]


class ReferenceWriteRequest(BaseModel):
    name: str


class ReferenceRead(BaseModel):
    id: int
    name: str


class ReferenceDataResponse(BaseModel):
    data: ReferenceRead


class ReferenceListResponse(BaseModel):
    data: list[ReferenceRead]
