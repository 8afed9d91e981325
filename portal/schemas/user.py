from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from portal.models.enums import UserRole


class UserCreate(BaseModel):
    external_id: str = Field(min_length=1, max_length=200)
    email: EmailStr
    first_name: str | None = Field(default=None, max_length=120)
    last_name: str | None = Field(default=None, max_length=120)
    phone: str | None = Field(default=None, max_length=40)
    role: UserRole = UserRole.AGENT
    # required for super admins creating users; agency admins always create in their own agency
    agency_id: str | None = None


class UserUpdate(BaseModel):
    first_name: str | None = Field(default=None, max_length=120)
    last_name: str | None = Field(default=None, max_length=120)
    phone: str | None = Field(default=None, max_length=40)
    active: bool | None = None


class UserOut(BaseModel):
    id: str
    external_id: str
    email: EmailStr
    first_name: str | None
    last_name: str | None
    phone: str | None
    role: str
    agency_id: str | None
    active: bool
    created_at: datetime


class ApiKeyCreated(BaseModel):
    id: str
    plain_key: str  # returned only once
    key_prefix: str
    user_id: str


class UserCreated(BaseModel):
    user: UserOut
    api_key: ApiKeyCreated


class SuperAdminBootstrap(BaseModel):
    external_id: str = Field(min_length=1, max_length=200)
    email: EmailStr
    first_name: str | None = Field(default=None, max_length=120)
    last_name: str | None = Field(default=None, max_length=120)
