from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from helpdesk.models.schemas.reference import ReferenceRead


class UserSummary(BaseModel):
    id: str
    name: str
    email: str


class UserCreateRequest(BaseModel):
    name: str
    email: EmailStr
    department_id: int | None = None


class UserUpdateRequest(BaseModel):
    name: str | None = None
    email: EmailStr | None = None
    department_id: int | None = None


class UserRead(BaseModel):
    id: str
    name: str
    email: str
    department_id: int | None = None
    department: ReferenceRead | None = None
    roles: list[ReferenceRead] = Field(default_factory=list)
    created_at: datetime


class UserDataResponse(BaseModel):
    data: UserRead


class UserListResponse(BaseModel):
    data: list[UserRead]


class UserRolesWriteRequest(BaseModel):
    role_ids: list[int] = Field(default_factory=list)


class UserRoleRead(BaseModel):
    id: int
    user_id: str
    role: ReferenceRead
    assigned_at: datetime


class UserRoleListResponse(BaseModel):
    data: list[UserRoleRead]
