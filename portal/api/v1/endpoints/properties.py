from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.db import get_db
from portal.models.listing import Property
from portal.schemas.listing_query import ListingQuery
from portal.schemas.property import (
    AgencySummary,
    AgentSummary,
    LocationsOut,
    PropertyOut,
    PropertyPage,
    PropertyStatsOut,
    PublicPropertyOut,
    SearchSuggestionsOut,
)
from portal.schemas.review import PropertyTransitionOut
from portal.services import lifecycle
from portal.services import listings as svc
from portal.services.auth import Actor, get_actor, get_optional_actor, require_super_admin
from portal.services.pagination import PageInfo
from portal.services.validation import listing_query
from portal.services.visibility import PROPERTY_RESOURCE, exposes_full_record

router = APIRouter()


def agent_summary(user) -> AgentSummary | None:
    if user is None:
        return None
    return AgentSummary(id=user.id, first_name=user.first_name, last_name=user.last_name, phone=user.phone)


def agency_summary(agency) -> AgencySummary | None:
    if agency is None:
        return None
    return AgencySummary(id=agency.id, name=agency.name, logo_url=agency.logo_url)


def _public_fields(p: Property) -> dict:
    return dict(
        id=p.id,
        title=p.title,
        description=p.description,
        type=p.type,
        transaction_type=p.transaction_type,
        status=p.status,
        address=p.address,
        location_state=p.location_state,
        location_city=p.location_city,
        location_neigh=p.location_neigh,
        municipality=p.municipality,
        latitude=p.latitude,
        longitude=p.longitude,
        google_maps_url=p.google_maps_url,
        price=p.price,
        currency=p.currency,
        bedrooms=p.bedrooms,
        bathrooms=p.bathrooms,
        garage_spaces=p.garage_spaces,
        square_meters=p.square_meters,
        images=list(p.images or []),
        videos=list(p.videos or []),
        features=list(p.features or []),
        agent=agent_summary(p.agent),
        agency=agency_summary(p.agency),
        created_at=p.created_at,
        updated_at=p.updated_at,
    )


def full_property_out(p: Property) -> PropertyOut:
    return PropertyOut(
        **_public_fields(p),
        agent_id=p.agent_id,
        agency_id=p.agency_id,
        rejection_reason=p.rejection_reason,
        reviewed_by=p.reviewed_by,
        status_changed_at=p.status_changed_at,
        created_by=p.created_by,
        updated_by=p.updated_by,
    )


def property_out(actor: Actor, p: Property) -> PropertyOut | PublicPropertyOut:
    if exposes_full_record(actor, p):
        return full_property_out(p)
    return PublicPropertyOut(**_public_fields(p))


def _page(actor: Actor, rows: list[Property], info: PageInfo) -> PropertyPage:
    return PropertyPage(
        listings=[property_out(actor, p) for p in rows],
        total_count=info.total_count,
        has_more=info.has_more,
        pagination=info.to_out(),
    )


@router.get("/properties", response_model=PropertyPage)
async def list_properties(
    query: ListingQuery = Depends(listing_query),
    actor: Actor = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> PropertyPage:
    rows, info = await svc.list_listings(db, actor, query, PROPERTY_RESOURCE)
    return _page(actor, rows, info)


@router.post("/properties", response_model=PropertyOut, status_code=201)
async def create_property(
    payload: dict = Body(...),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> PropertyOut:
    prop = await svc.create_property(db, actor, payload)
    return full_property_out(prop)


# static paths first so they are not captured by /properties/{property_id}
@router.get("/properties/pending", response_model=PropertyPage)
async def pending_properties(
    query: ListingQuery = Depends(listing_query),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> PropertyPage:
    rows, info = await svc.pending_queue(db, actor, query, PROPERTY_RESOURCE)
    return _page(actor, rows, info)


@router.get("/properties/locations", response_model=LocationsOut)
async def property_locations(
    query: ListingQuery = Depends(listing_query),
    actor: Actor = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> LocationsOut:
    return LocationsOut(**await svc.property_locations(db, actor, query))


@router.get("/properties/search-suggestions", response_model=SearchSuggestionsOut)
async def property_search_suggestions(
    q: str | None = Query(default=None, max_length=200),
    db: AsyncSession = Depends(get_db),
) -> SearchSuggestionsOut:
    return SearchSuggestionsOut(suggestions=await svc.search_suggestions(db, q))


@router.get("/properties/stats", response_model=PropertyStatsOut)
async def property_stats(
    actor: Actor = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
) -> PropertyStatsOut:
    return PropertyStatsOut(**await svc.property_stats(db, actor))


@router.get("/properties/{property_id}", response_model=PropertyOut | PublicPropertyOut)
async def get_property(
    property_id: str,
    actor: Actor = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> PropertyOut | PublicPropertyOut:
    prop = await svc.get_listing_for_read(db, actor, PROPERTY_RESOURCE, property_id)
    return property_out(actor, prop)


@router.patch("/properties/{property_id}", response_model=PropertyOut)
async def update_property(
    property_id: str,
    payload: dict = Body(...),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> PropertyOut:
    prop = await svc.update_listing(db, actor, PROPERTY_RESOURCE, property_id, payload)
    return full_property_out(prop)


@router.post("/properties/{property_id}/approve", response_model=PropertyTransitionOut)
async def approve_property(
    property_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> PropertyTransitionOut:
    prop, previous = await svc.transition(db, actor, PROPERTY_RESOURCE, property_id, lifecycle.APPROVE)
    return PropertyTransitionOut(
        message="Property approved",
        previous_status=previous.value,
        listing=full_property_out(prop),
    )


@router.post("/properties/{property_id}/reject", response_model=PropertyTransitionOut)
async def reject_property(
    property_id: str,
    payload: Any = Body(default=None),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> PropertyTransitionOut:
    prop, previous = await svc.transition(
        db, actor, PROPERTY_RESOURCE, property_id, lifecycle.REJECT, payload=payload
    )
    return PropertyTransitionOut(
        message="Property rejected",
        previous_status=previous.value,
        listing=full_property_out(prop),
    )


@router.post("/properties/{property_id}/resubmit", response_model=PropertyTransitionOut)
async def resubmit_property(
    property_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> PropertyTransitionOut:
    prop, previous = await svc.transition(db, actor, PROPERTY_RESOURCE, property_id, lifecycle.RESUBMIT)
    return PropertyTransitionOut(
        message="Property resubmitted for review",
        previous_status=previous.value,
        listing=full_property_out(prop),
    )
