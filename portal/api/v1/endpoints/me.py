from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.db import get_db
from portal.core.errors import NotFoundError
from portal.models.user import User
from portal.schemas.me import MeOut
from portal.services.auth import Actor, get_actor

router = APIRouter()

@router.get("/me", response_model=MeOut)
async def me(actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)) -> MeOut:
    user = await db.get(User, actor.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return MeOut(
        user_id=user.id,
        api_key_id=actor.api_key_id,
        role=actor.role.value,
        agency_id=actor.agency_id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
    )
