from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from portal.models.enums import Currency, PropertyType, TransactionType
from portal.schemas.common import PaginationOut, blank_to_none


class PropertyCreate(BaseModel):
    # unknown keys (including "status") are dropped: new listings always start PENDING
    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=5, max_length=100)
    description: str = Field(min_length=20, max_length=1000)
    type: PropertyType
    transaction_type: TransactionType

    address: str = Field(min_length=10, max_length=300)
    location_state: str = Field(min_length=2, max_length=120)
    location_city: str = Field(min_length=2, max_length=120)
    location_neigh: str | None = Field(default=None, max_length=120)
    municipality: str | None = Field(default=None, max_length=120)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    google_maps_url: str | None = Field(default=None, max_length=1000)

    price: float = Field(gt=0)
    currency: Currency = Currency.DOLLARS
    bedrooms: int = Field(ge=0)
    bathrooms: int = Field(ge=0)
    garage_spaces: int = Field(default=0, ge=0)
    square_meters: float = Field(gt=0)

    images: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)

    @field_validator("location_neigh", "municipality", "latitude", "longitude", "google_maps_url", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)


class PropertyUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str | None = Field(default=None, min_length=5, max_length=100)
    description: str | None = Field(default=None, min_length=20, max_length=1000)
    type: PropertyType | None = None
    transaction_type: TransactionType | None = None
    address: str | None = Field(default=None, min_length=10, max_length=300)
    location_state: str | None = Field(default=None, min_length=2, max_length=120)
    location_city: str | None = Field(default=None, min_length=2, max_length=120)
    location_neigh: str | None = Field(default=None, max_length=120)
    municipality: str | None = Field(default=None, max_length=120)
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    google_maps_url: str | None = Field(default=None, max_length=1000)
    price: float | None = Field(default=None, gt=0)
    currency: Currency | None = None
    bedrooms: int | None = Field(default=None, ge=0)
    bathrooms: int | None = Field(default=None, ge=0)
    garage_spaces: int | None = Field(default=None, ge=0)
    square_meters: float | None = Field(default=None, gt=0)
    images: list[str] | None = None
    videos: list[str] | None = None
    features: list[str] | None = None

    @field_validator("location_neigh", "municipality", "latitude", "longitude", "google_maps_url", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return blank_to_none(v)


class AgentSummary(BaseModel):
    id: str
    first_name: str | None
    last_name: str | None
    phone: str | None


class AgencySummary(BaseModel):
    id: str
    name: str
    logo_url: str | None


class PublicPropertyOut(BaseModel):
    id: str
    title: str
    description: str
    type: str
    transaction_type: str
    status: str
    address: str
    location_state: str
    location_city: str
    location_neigh: str | None
    municipality: str | None
    latitude: float | None
    longitude: float | None
    google_maps_url: str | None
    price: float
    currency: str
    bedrooms: int
    bathrooms: int
    garage_spaces: int
    square_meters: float
    images: list[str]
    videos: list[str]
    features: list[str]
    agent: AgentSummary | None
    agency: AgencySummary | None
    created_at: datetime
    updated_at: datetime


class PropertyOut(PublicPropertyOut):
    """Full record for callers who can manage the listing."""

    agent_id: str
    agency_id: str
    rejection_reason: str | None
    reviewed_by: str | None
    status_changed_at: datetime | None
    created_by: str | None
    updated_by: str | None


class PropertyPage(BaseModel):
    listings: list[PropertyOut | PublicPropertyOut]
    total_count: int
    has_more: bool
    pagination: PaginationOut


class PropertyStatsOut(BaseModel):
    total: int
    approved: int
    pending: int
    rejected: int
    total_value: float


class CityOption(BaseModel):
    value: str
    label: str
    state: str


class LocationsOut(BaseModel):
    states: list[str]
    cities: list[CityOption]
    municipalities: list[str]



class SearchSuggestion(BaseModel):
    type: Literal["location", "property_type", "price_range"]
    value: str
    label: str
    category: str | None = None


class SearchSuggestionsOut(BaseModel):
    suggestions: list[SearchSuggestion]
