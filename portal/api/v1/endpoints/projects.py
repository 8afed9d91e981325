from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.v1.endpoints.properties import agency_summary, agent_summary
from portal.core.db import get_db
from portal.models.floor import Floor, Quadrant
from portal.models.listing import Project
from portal.schemas.listing_query import ListingQuery
from portal.schemas.project import FloorOut, ProjectOut, ProjectPage, PublicProjectOut, QuadrantOut
from portal.schemas.review import ProjectTransitionOut
from portal.services import lifecycle
from portal.services import listings as svc
from portal.services.auth import Actor, get_actor, get_optional_actor
from portal.services.pagination import PageInfo
from portal.services.validation import listing_query
from portal.services.visibility import PROJECT_RESOURCE, exposes_full_record

router = APIRouter()


def quadrant_out(q: Quadrant) -> QuadrantOut:
    return QuadrantOut(
        id=q.id,
        floor_id=q.floor_id,
        custom_id=q.custom_id,
        type=q.type,
        area=q.area,
        bedrooms=q.bedrooms,
        bathrooms=q.bathrooms,
        price=q.price,
        currency=q.currency,
        exchange_rate=q.exchange_rate,
        status=q.status,
        active=q.active,
    )


def floor_out(f: Floor) -> FloorOut:
    return FloorOut(
        id=f.id,
        project_id=f.project_id,
        number=f.number,
        name=f.name,
        quadrants=[quadrant_out(q) for q in f.quadrants],
    )


def _public_fields(p: Project) -> dict:
    return dict(
        id=p.id,
        name=p.name,
        description=p.description,
        location=p.location,
        status=p.status,
        images=list(p.images or []),
        brochure_url=p.brochure_url,
        google_maps_url=p.google_maps_url,
        latitude=p.latitude,
        longitude=p.longitude,
        floors=[floor_out(f) for f in p.floors],
        agent=agent_summary(p.agent),
        agency=agency_summary(p.agency),
        created_at=p.created_at,
        updated_at=p.updated_at,
    )


def full_project_out(p: Project) -> ProjectOut:
    return ProjectOut(
        **_public_fields(p),
        agent_id=p.agent_id,
        agency_id=p.agency_id,
        rejection_reason=p.rejection_reason,
        reviewed_by=p.reviewed_by,
        status_changed_at=p.status_changed_at,
        created_by=p.created_by,
        updated_by=p.updated_by,
    )


def project_out(actor: Actor, p: Project) -> ProjectOut | PublicProjectOut:
    if exposes_full_record(actor, p):
        return full_project_out(p)
    return PublicProjectOut(**_public_fields(p))


def _page(actor: Actor, rows: list[Project], info: PageInfo) -> ProjectPage:
    return ProjectPage(
        listings=[project_out(actor, p) for p in rows],
        total_count=info.total_count,
        has_more=info.has_more,
        pagination=info.to_out(),
    )


@router.get("/projects", response_model=ProjectPage)
async def list_projects(
    query: ListingQuery = Depends(listing_query),
    actor: Actor = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> ProjectPage:
    rows, info = await svc.list_listings(db, actor, query, PROJECT_RESOURCE)
    return _page(actor, rows, info)


@router.post("/projects", response_model=ProjectOut, status_code=201)
async def create_project(
    payload: dict = Body(...),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ProjectOut:
    project = await svc.create_project(db, actor, payload)
    return full_project_out(project)


@router.get("/projects/pending", response_model=ProjectPage)
async def pending_projects(
    query: ListingQuery = Depends(listing_query),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ProjectPage:
    rows, info = await svc.pending_queue(db, actor, query, PROJECT_RESOURCE)
    return _page(actor, rows, info)


@router.get("/projects/{project_id}", response_model=ProjectOut | PublicProjectOut)
async def get_project(
    project_id: str,
    actor: Actor = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> ProjectOut | PublicProjectOut:
    project = await svc.get_listing_for_read(db, actor, PROJECT_RESOURCE, project_id)
    return project_out(actor, project)


@router.patch("/projects/{project_id}", response_model=ProjectOut)
async def update_project(
    project_id: str,
    payload: dict = Body(...),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ProjectOut:
    project = await svc.update_listing(db, actor, PROJECT_RESOURCE, project_id, payload)
    return full_project_out(project)


@router.post("/projects/{project_id}/approve", response_model=ProjectTransitionOut)
async def approve_project(
    project_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ProjectTransitionOut:
    project, previous = await svc.transition(db, actor, PROJECT_RESOURCE, project_id, lifecycle.APPROVE)
    return ProjectTransitionOut(
        message="Project approved",
        previous_status=previous.value,
        listing=full_project_out(project),
    )


@router.post("/projects/{project_id}/reject", response_model=ProjectTransitionOut)
async def reject_project(
    project_id: str,
    payload: Any = Body(default=None),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ProjectTransitionOut:
    project, previous = await svc.transition(
        db, actor, PROJECT_RESOURCE, project_id, lifecycle.REJECT, payload=payload
    )
    return ProjectTransitionOut(
        message="Project rejected",
        previous_status=previous.value,
        listing=full_project_out(project),
    )


@router.post("/projects/{project_id}/resubmit", response_model=ProjectTransitionOut)
async def resubmit_project(
    project_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ProjectTransitionOut:
    project, previous = await svc.transition(db, actor, PROJECT_RESOURCE, project_id, lifecycle.RESUBMIT)
    return ProjectTransitionOut(
        message="Project resubmitted for review",
        previous_status=previous.value,
        listing=full_project_out(project),
    )
