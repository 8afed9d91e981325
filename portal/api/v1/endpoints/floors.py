from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.v1.endpoints.projects import floor_out, quadrant_out
from portal.core.db import get_db
from portal.schemas.project import FloorOut, QuadrantOut
from portal.services import floors as svc
from portal.services.auth import Actor, get_actor, get_optional_actor

router = APIRouter()


@router.get("/projects/{project_id}/floors", response_model=list[FloorOut])
async def list_floors(
    project_id: str,
    actor: Actor = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> list[FloorOut]:
    return [floor_out(f) for f in await svc.list_floors(db, actor, project_id)]


@router.post("/projects/{project_id}/floors", response_model=FloorOut, status_code=201)
async def add_floor(
    project_id: str,
    payload: dict = Body(...),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> FloorOut:
    return floor_out(await svc.add_floor(db, actor, project_id, payload))


@router.post("/floors/{floor_id}/quadrants", response_model=QuadrantOut, status_code=201)
async def add_quadrant(
    floor_id: str,
    payload: dict = Body(...),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> QuadrantOut:
    return quadrant_out(await svc.add_quadrant(db, actor, floor_id, payload))


@router.patch("/quadrants/{quadrant_id}", response_model=QuadrantOut)
async def update_quadrant(
    quadrant_id: str,
    payload: dict = Body(...),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> QuadrantOut:
    return quadrant_out(await svc.update_quadrant(db, actor, quadrant_id, payload))
