from pydantic import BaseModel


class MeOut(BaseModel):
    user_id: str
    api_key_id: str | None
    role: str
    agency_id: str | None
    email: str
    first_name: str | None
    last_name: str | None
