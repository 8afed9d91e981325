from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from typing import Literal

from portal.schemas.common import PaginationOut


class AgencyCreate(BaseModel):
    name: str = Field(min_length=2, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=40)
    address: str | None = Field(default=None, max_length=300)
    logo_url: str | None = Field(default=None, max_length=1000)


class AgencyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=40)
    address: str | None = Field(default=None, max_length=300)
    logo_url: str | None = Field(default=None, max_length=1000)
    active: bool | None = None


class AgencyQuery(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    active: bool | None = None
    search: str | None = Field(default=None, max_length=200)
    sort_by: Literal["createdAt", "name"] = "createdAt"
    sort_order: Literal["asc", "desc"] = "desc"
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class AgencyOut(BaseModel):
    id: str
    name: str
    email: str | None
    phone: str | None
    address: str | None
    logo_url: str | None
    active: bool
    created_at: datetime
    updated_at: datetime
    user_count: int | None = None
    property_count: int | None = None


class AgencyPage(BaseModel):
    agencies: list[AgencyOut]
    total_count: int
    has_more: bool
    pagination: PaginationOut
