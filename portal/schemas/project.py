from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from portal.models.enums import Currency, QuadrantStatus, QuadrantType
from portal.schemas.common import PaginationOut, blank_to_none
from portal.schemas.property import AgencySummary, AgentSummary


class QuadrantIn(BaseModel):
    custom_id: str = Field(min_length=1, max_length=50)
    type: QuadrantType = QuadrantType.DEPARTAMENTO
    area: float = Field(gt=0)
    bedrooms: int = Field(ge=0)
    bathrooms: int = Field(ge=0)
    price: float = Field(gt=0)
    currency: Currency
    exchange_rate: float | None = Field(default=None, gt=0)
    status: QuadrantStatus = QuadrantStatus.AVAILABLE
    active: bool = True


class QuadrantUpdate(BaseModel):
    custom_id: str | None = Field(default=None, min_length=1, max_length=50)
    type: QuadrantType | None = None
    area: float | None = Field(default=None, gt=0)
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    price: float | None = Field(default=None, gt=0)
    currency: Currency | None = None
    exchange_rate: float | None = Field(default=None, gt=0)
    status: QuadrantStatus | None = None
    active: bool | None = None


class FloorIn(BaseModel):
    number: int = Field(ge=1)
    name: str | None = Field(default=None, max_length=50)
    quadrants: list[QuadrantIn] = Field(default_factory=list)


class ProjectCreate(BaseModel):
    # "status" and other unknown keys are dropped
    model_config = ConfigDict(extra="ignore")

    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=10, max_length=2000)
    location: str = Field(min_length=1, max_length=200)
    images: list[HttpUrl] = Field(default_factory=list)
    brochure_url: HttpUrl | None = None
    google_maps_url: HttpUrl | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    floors: list[FloorIn] = Field(default_factory=list)

    @field_validator("brochure_url", "google_maps_url", "latitude", "longitude", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)

    @field_validator("floors")
    @classmethod
    def unique_floor_numbers(cls, v: list[FloorIn]) -> list[FloorIn]:
        numbers = [f.number for f in v]
        if len(numbers) != len(set(numbers)):
            raise ValueError("floor numbers must be unique within a project")
        return v


class ProjectUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=10, max_length=2000)
    location: str | None = Field(default=None, min_length=1, max_length=200)
    images: list[HttpUrl] | None = None
    brochure_url: HttpUrl | None = None
    google_maps_url: HttpUrl | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)

    @field_validator("brochure_url", "google_maps_url", "latitude", "longitude", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)


class QuadrantOut(BaseModel):
    id: str
    floor_id: str
    custom_id: str
    type: str
    area: float
    bedrooms: int
    bathrooms: int
    price: float
    currency: str
    exchange_rate: float | None
    status: str
    active: bool


class FloorOut(BaseModel):
    id: str
    project_id: str
    number: int
    name: str | None
    quadrants: list[QuadrantOut]


class PublicProjectOut(BaseModel):
    id: str
    name: str
    description: str
    location: str
    status: str
    images: list[str]
    brochure_url: str | None
    google_maps_url: str | None
    latitude: float | None
    longitude: float | None
    floors: list[FloorOut]
    agent: AgentSummary | None
    agency: AgencySummary | None
    created_at: datetime
    updated_at: datetime


class ProjectOut(PublicProjectOut):
    agent_id: str
    agency_id: str
    rejection_reason: str | None
    reviewed_by: str | None
    status_changed_at: datetime | None
    created_by: str | None
    updated_by: str | None


class ProjectPage(BaseModel):
    listings: list[ProjectOut | PublicProjectOut]
    total_count: int
    has_more: bool
    pagination: PaginationOut
