from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from helpdesk.models.schemas.user import UserRead


class SignUpRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    first_name: str | None = None
    last_name: str | None = None


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class SessionRead(BaseModel):
    access_token: str
    token_type: Literal["bearer"] = "bearer"
    expires_at: datetime
    user: UserRead


class SessionDataResponse(BaseModel):
    data: SessionRead
