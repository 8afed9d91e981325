from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.errors import ConflictError, NotFoundError, ValidationError
from portal.models.floor import Floor, Quadrant
from portal.models.listing import Project
from portal.schemas.project import FloorIn, QuadrantIn, QuadrantUpdate
from portal.services.audit import audit
from portal.services.auth import Actor
from portal.services.listings import get_listing_for_read, load_managed_listing
from portal.services.validation import validate_or_raise
from portal.services.visibility import PROJECT_RESOURCE

log = logging.getLogger(__name__)


async def list_floors(db: AsyncSession, actor: Actor, project_id: str) -> list[Floor]:
    project = await get_listing_for_read(db, actor, PROJECT_RESOURCE, project_id)
    return list(project.floors)


async def add_floor(db: AsyncSession, actor: Actor, project_id: str, payload: Any) -> Floor:
    project: Project = await load_managed_listing(db, actor, PROJECT_RESOURCE, project_id)
    data = validate_or_raise(FloorIn, payload)

    existing = (
        await db.execute(select(Floor.id).where(Floor.project_id == project.id, Floor.number == data.number))
    ).scalar_one_or_none()
    if existing:
        raise ConflictError(f"Floor {data.number} already exists in this project")

    floor = Floor(
        project_id=project.id,
        number=data.number,
        name=data.name,
        created_by=actor.user_id,
        updated_by=actor.user_id,
        quadrants=[
            Quadrant(**q.model_dump(mode="json"), created_by=actor.user_id, updated_by=actor.user_id)
            for q in data.quadrants
        ],
    )
    db.add(floor)
    await db.flush()
    await audit(
        db,
        agency_id=project.agency_id,
        actor_user_id=actor.user_id,
        action="floor.created",
        target_type="floor",
        target_id=floor.id,
        detail={"project_id": project.id, "number": floor.number},
    )
    await db.commit()
    await db.refresh(floor)
    return floor


async def _managed_floor(db: AsyncSession, actor: Actor, floor_id: str) -> tuple[Floor, Project]:
    floor = await db.get(Floor, floor_id)
    if floor is None:
        raise NotFoundError("Floor not found")
    project = await load_managed_listing(db, actor, PROJECT_RESOURCE, floor.project_id)
    return floor, project


async def add_quadrant(db: AsyncSession, actor: Actor, floor_id: str, payload: Any) -> Quadrant:
    floor, project = await _managed_floor(db, actor, floor_id)
    data = validate_or_raise(QuadrantIn, payload)

    quadrant = Quadrant(
        floor_id=floor.id,
        **data.model_dump(mode="json"),
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )
    db.add(quadrant)
    await db.flush()
    await audit(
        db,
        agency_id=project.agency_id,
        actor_user_id=actor.user_id,
        action="quadrant.created",
        target_type="quadrant",
        target_id=quadrant.id,
        detail={"floor_id": floor.id, "custom_id": quadrant.custom_id},
    )
    await db.commit()
    await db.refresh(quadrant)
    return quadrant


async def update_quadrant(db: AsyncSession, actor: Actor, quadrant_id: str, payload: Any) -> Quadrant:
    quadrant = await db.get(Quadrant, quadrant_id)
    if quadrant is None:
        raise NotFoundError("Quadrant not found")
    _, project = await _managed_floor(db, actor, quadrant.floor_id)

    data = validate_or_raise(QuadrantUpdate, payload)
    changes = data.model_dump(mode="json", exclude_unset=True)
    nulls = sorted(k for k, v in changes.items() if v is None and k != "exchange_rate")
    if nulls:
        raise ValidationError(
            "Required fields cannot be cleared",
            details=[{"field": k, "type": "missing", "message": "must not be null"} for k in nulls],
        )

    for key, value in changes.items():
        setattr(quadrant, key, value)
    quadrant.updated_by = actor.user_id

    await audit(
        db,
        agency_id=project.agency_id,
        actor_user_id=actor.user_id,
        action="quadrant.updated",
        target_type="quadrant",
        target_id=quadrant.id,
        detail={"fields": sorted(changes)},
    )
    await db.commit()
    await db.refresh(quadrant)

    log.info("quadrant %s updated by %s: %s", quadrant.id, actor.user_id, sorted(changes))
    return quadrant
