from pydantic import BaseModel, Field


class IdResponse(BaseModel):
    id: str


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: list[dict] = Field(default_factory=list)


class PaginationOut(BaseModel):
    limit: int
    offset: int
    page: int
    total_pages: int


def blank_to_none(v):
    # forms send "" for untouched optional fields
    if isinstance(v, str) and not v.strip():
        return None
    return v
