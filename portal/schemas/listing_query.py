from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Literal

from portal.models.enums import ListingStatus, PropertyType, TransactionType


class ListingQuery(BaseModel):
    """
    Query-string filters for listing feeds.
    Accepts camelCase (``minPrice``) and snake_case (``min_price``) names.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    # ownership / lifecycle (scoped by role, see services.visibility)
    status: ListingStatus | None = None
    agent_id: str | None = None
    agency_id: str | None = None

    # property filters
    type: PropertyType | None = None
    transaction_type: TransactionType | None = None
    location_state: str | None = None
    location_city: str | None = None
    location_neigh: str | None = None
    municipality: str | None = None
    min_price: float | None = Field(default=None, gt=0)
    max_price: float | None = Field(default=None, gt=0)
    min_bedrooms: int | None = Field(default=None, ge=0)
    max_bedrooms: int | None = Field(default=None, ge=0)
    min_bathrooms: int | None = Field(default=None, ge=0)
    max_bathrooms: int | None = Field(default=None, ge=0)
    min_square_meters: float | None = Field(default=None, gt=0)
    max_square_meters: float | None = Field(default=None, gt=0)
    features: list[str] = Field(default_factory=list)

    # project filters
    location: str | None = None

    search: str | None = Field(default=None, max_length=200)

    sort_by: str = "createdAt"
    sort_order: Literal["asc", "desc"] = "desc"
    limit: int = Field(default=20, ge=1, le=100)
    offset: int | None = Field(default=None, ge=0)
    page: int | None = Field(default=None, ge=1)

    @model_validator(mode="after")
    def check_ranges(self) -> "ListingQuery":
        for low, high in (
            ("min_price", "max_price"),
            ("min_bedrooms", "max_bedrooms"),
            ("min_bathrooms", "max_bathrooms"),
            ("min_square_meters", "max_square_meters"),
        ):
            lo, hi = getattr(self, low), getattr(self, high)
            if lo is not None and hi is not None and lo > hi:
                raise ValueError(f"{low} must be less than or equal to {high}")
        return self

    @property
    def resolved_offset(self) -> int:
        # explicit offset wins; otherwise derive it from page
        if self.offset is not None:
            return self.offset
        if self.page is not None:
            return (self.page - 1) * self.limit
        return 0
