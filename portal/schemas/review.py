from pydantic import BaseModel, Field

from portal.schemas.project import ProjectOut
from portal.schemas.property import PropertyOut


class RejectIn(BaseModel):
    # emptiness is checked by the lifecycle so a blank reason is a 400, not a 422
    reason: str | None = Field(default=None, max_length=2000)


class PropertyTransitionOut(BaseModel):
    message: str
    previous_status: str
    listing: PropertyOut


class ProjectTransitionOut(BaseModel):
    message: str
    previous_status: str
    listing: ProjectOut
