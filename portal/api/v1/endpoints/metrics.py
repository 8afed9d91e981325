from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.db import get_db
from portal.schemas.metrics import MetricsOut
from portal.services.auth import Actor, get_actor
from portal.services.metrics import dashboard

router = APIRouter()


@router.get("/metrics", response_model=MetricsOut, response_model_exclude_none=True)
async def metrics(actor: Actor = Depends(get_actor), db: AsyncSession = Depends(get_db)) -> MetricsOut:
    return await dashboard(db, actor)
