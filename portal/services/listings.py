from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.errors import AuthorizationError, NotFoundError, ValidationError
from portal.models.enums import ListingStatus, PropertyType
from portal.models.floor import Floor, Quadrant
from portal.models.listing import Project, Property
from portal.schemas.listing_query import ListingQuery
from portal.schemas.project import ProjectCreate, ProjectUpdate
from portal.schemas.property import PropertyCreate, PropertyUpdate
from portal.schemas.review import RejectIn
from portal.services import lifecycle
from portal.services.audit import audit
from portal.services.auth import ANONYMOUS, Actor
from portal.services.pagination import PageInfo, page_info
from portal.services.validation import validate_or_raise
from portal.services.visibility import (
    ListingResource,
    Predicate,
    can_manage_listing,
    can_view_listing,
    resolve_sort,
    role_predicate,
    scope_predicate,
)

log = logging.getLogger(__name__)

_UPDATE_SCHEMAS = {"property": PropertyUpdate, "project": ProjectUpdate}


async def _count(db: AsyncSession, model: type, predicate: Predicate) -> int:
    stmt = select(func.count()).select_from(model).where(*predicate.to_clauses(model))
    return (await db.execute(stmt)).scalar_one()


async def list_listings(
    db: AsyncSession,
    actor: Actor,
    query: ListingQuery,
    resource: ListingResource,
) -> tuple[list[Any], PageInfo]:
    """
    One page of the listings ``actor`` may see, plus paging info.
    Filters and sort are resolved before any query runs, so a bad filter
    never reaches the database.
    """
    predicate = scope_predicate(actor, query, resource)
    column, descending = resolve_sort(query, resource)
    model = resource.model

    total = await _count(db, model, predicate)
    info = page_info(total_count=total, limit=query.limit, offset=query.resolved_offset)

    order_col = getattr(model, column)
    stmt = (
        select(model)
        .where(*predicate.to_clauses(model))
        .order_by(order_col.desc() if descending else order_col.asc(), model.id)
        .limit(info.limit)
        .offset(info.offset)
    )
    rows = (await db.execute(stmt)).unique().scalars().all()
    return list(rows), info


async def load_listing(db: AsyncSession, resource: ListingResource, listing_id: str) -> Any:
    listing = await db.get(resource.model, listing_id)
    if listing is None:
        raise NotFoundError(f"{resource.name.capitalize()} not found")
    return listing


async def get_listing_for_read(
    db: AsyncSession,
    actor: Actor,
    resource: ListingResource,
    listing_id: str,
) -> Any:
    listing = await load_listing(db, resource, listing_id)
    # hidden listings look exactly like missing ones
    if not can_view_listing(actor, listing):
        raise NotFoundError(f"{resource.name.capitalize()} not found")
    return listing


async def create_property(db: AsyncSession, actor: Actor, payload: Any) -> Property:
    fields = lifecycle.initial_fields(actor)
    data = validate_or_raise(PropertyCreate, payload)

    prop = Property(**data.model_dump(mode="json"), **fields)
    db.add(prop)
    await db.flush()
    await audit(
        db,
        agency_id=prop.agency_id,
        actor_user_id=actor.user_id,
        action="property.created",
        target_type="property",
        target_id=prop.id,
        detail={"status": prop.status},
    )
    await db.commit()
    await db.refresh(prop)

    log.info("property %s created by %s (agency %s)", prop.id, actor.user_id, prop.agency_id)
    return prop


def _build_floor(floor_in: Any, actor: Actor) -> Floor:
    return Floor(
        number=floor_in.number,
        name=floor_in.name,
        created_by=actor.user_id,
        updated_by=actor.user_id,
        quadrants=[
            Quadrant(**q.model_dump(mode="json"), created_by=actor.user_id, updated_by=actor.user_id)
            for q in floor_in.quadrants
        ],
    )


async def create_project(db: AsyncSession, actor: Actor, payload: Any) -> Project:
    fields = lifecycle.initial_fields(actor)
    data = validate_or_raise(ProjectCreate, payload)

    project = Project(**data.model_dump(mode="json", exclude={"floors"}), **fields)
    project.floors = [_build_floor(f, actor) for f in data.floors]
    db.add(project)
    await db.flush()
    await audit(
        db,
        agency_id=project.agency_id,
        actor_user_id=actor.user_id,
        action="project.created",
        target_type="project",
        target_id=project.id,
        detail={"status": project.status, "floors": len(data.floors)},
    )
    await db.commit()
    await db.refresh(project)

    log.info("project %s created by %s (agency %s)", project.id, actor.user_id, project.agency_id)
    return project


async def load_managed_listing(
    db: AsyncSession,
    actor: Actor,
    resource: ListingResource,
    listing_id: str,
) -> Any:
    listing = await get_listing_for_read(db, actor, resource, listing_id)
    if not can_manage_listing(actor, listing):
        raise AuthorizationError(f"You cannot modify this {resource.name}")
    return listing


async def update_listing(
    db: AsyncSession,
    actor: Actor,
    resource: ListingResource,
    listing_id: str,
    payload: Any,
) -> Any:
    """Content edit. Lifecycle columns are never writable here."""
    listing = await load_managed_listing(db, actor, resource, listing_id)
    data = validate_or_raise(_UPDATE_SCHEMAS[resource.name], payload)
    changes = data.model_dump(mode="json", exclude_unset=True)

    columns = resource.model.__table__.c
    required = sorted(k for k, v in changes.items() if v is None and not columns[k].nullable)
    if required:
        raise ValidationError(
            "Required fields cannot be cleared",
            details=[{"field": k, "type": "missing", "message": "must not be null"} for k in required],
        )

    for key, value in changes.items():
        setattr(listing, key, value)
    listing.updated_by = actor.user_id

    previous = lifecycle.after_content_edit(listing, actor)
    await audit(
        db,
        agency_id=listing.agency_id,
        actor_user_id=actor.user_id,
        action=f"{resource.name}.updated",
        target_type=resource.name,
        target_id=listing.id,
        detail={"fields": sorted(changes), "resubmitted": previous is not None},
    )
    await db.commit()
    await db.refresh(listing)

    if previous is not None:
        log.info("%s %s resubmitted by edit (was %s)", resource.name, listing.id, previous.value)
    return listing


async def transition(
    db: AsyncSession,
    actor: Actor,
    resource: ListingResource,
    listing_id: str,
    action: str,
    *,
    payload: Any = None,
) -> tuple[Any, ListingStatus]:
    """
    Load, transition, audit and commit. Returns (listing, previous_status).
    ``payload`` is the reject body; it is validated only once the actor may review.
    """
    listing = await load_listing(db, resource, listing_id)

    if action == lifecycle.APPROVE:
        previous = lifecycle.approve(listing, actor)
    elif action == lifecycle.REJECT:
        lifecycle.assert_can_review(actor, listing)
        body = validate_or_raise(RejectIn, payload or {})
        previous = lifecycle.reject(listing, actor, body.reason)
    elif action == lifecycle.RESUBMIT:
        previous = lifecycle.resubmit(listing, actor)
    else:
        raise ValueError(f"Unknown transition: {action}")

    await audit(
        db,
        agency_id=listing.agency_id,
        actor_user_id=actor.user_id,
        action=f"{resource.name}.{action}",
        target_type=resource.name,
        target_id=listing.id,
        detail={
            "from": previous.value,
            "to": listing.status,
            "reason": listing.rejection_reason,
        },
    )
    await db.commit()
    await db.refresh(listing)

    log.info(
        "%s %s: %s -> %s by %s",
        resource.name,
        listing.id,
        previous.value,
        listing.status,
        actor.user_id,
    )
    return listing, previous


async def pending_queue(
    db: AsyncSession,
    actor: Actor,
    query: ListingQuery,
    resource: ListingResource,
) -> tuple[list[Any], PageInfo]:
    """PENDING listings awaiting review, oldest first."""
    if not (actor.is_super_admin or actor.is_agency_admin):
        raise AuthorizationError("Agency admin or super admin role required")

    queue_query = query.model_copy(
        update={
            "status": ListingStatus.PENDING,
            "sort_by": "createdAt",
            "sort_order": "asc",
        }
    )
    return await list_listings(db, actor, queue_query, resource)


async def property_locations(db: AsyncSession, actor: Actor, query: ListingQuery) -> dict[str, Any]:
    """Distinct location facets over the properties ``actor`` can see."""
    predicate = role_predicate(actor, query)
    stmt = (
        select(Property.location_state, Property.location_city, Property.municipality)
        .where(*predicate.to_clauses(Property))
        .distinct()
    )
    rows = (await db.execute(stmt)).all()

    states: set[str] = set()
    cities: dict[tuple[str, str], None] = {}
    municipalities: set[str] = set()
    for state, city, municipality in rows:
        if state:
            states.add(state)
        if city:
            cities[(city, state or "")] = None
        if municipality:
            municipalities.add(municipality)

    return {
        "states": sorted(states),
        "cities": [
            {"value": city, "label": f"{city}, {state}" if state else city, "state": state}
            for city, state in sorted(cities)
        ],
        "municipalities": sorted(municipalities),
    }


SUGGESTION_MIN_CHARS = 2
SUGGESTION_LOCATION_ROWS = 20
SUGGESTION_LIMIT = 10

PROPERTY_TYPE_LABELS = {
    PropertyType.HOUSE: "Casa",
    PropertyType.APARTMENT: "Departamento",
    PropertyType.OFFICE: "Oficina",
    PropertyType.LAND: "Terreno",
    PropertyType.COMMERCIAL: "Local comercial",
    PropertyType.WAREHOUSE: "Deposito",
}

# (min, max, label); max None means open-ended
PRICE_RANGES = (
    (0, 200_000, "Up to Bs. 200.000"),
    (200_000, 500_000, "Bs. 200.000 - Bs. 500.000"),
    (500_000, 1_000_000, "Bs. 500.000 - Bs. 1.000.000"),
    (1_000_000, 2_000_000, "Bs. 1.000.000 - Bs. 2.000.000"),
    (2_000_000, None, "Over Bs. 2.000.000"),
)


def build_search_suggestions(text: str, location_rows: list[tuple[Any, Any, Any]]) -> list[dict[str, Any]]:
    """
    Typeahead entries for ``text`` (already lower-cased and trimmed).
    ``location_rows`` are (state, city, neighbourhood) tuples of public properties.
    """
    suggestions: list[dict[str, Any]] = []
    seen: set[str] = set()

    def add_location(value: str | None, label: str, category: str) -> None:
        if not value or text not in value.lower() or value in seen:
            return
        seen.add(value)
        suggestions.append({"type": "location", "value": value, "label": label, "category": category})

    for state, city, neigh in location_rows:
        add_location(state, state, "State")
        add_location(city, f"{city}, {state}" if state else city or "", "City")
        add_location(neigh, f"{neigh}, {city}" if city else neigh or "", "Neighbourhood")

    for ptype, label in PROPERTY_TYPE_LABELS.items():
        if text in label.lower() or text in ptype.value.lower():
            suggestions.append(
                {"type": "property_type", "value": ptype.value, "label": label, "category": "Property type"}
            )

    if any(ch.isdigit() for ch in text):
        for low, high, label in PRICE_RANGES:
            suggestions.append(
                {
                    "type": "price_range",
                    "value": f"{low}-{'' if high is None else high}",
                    "label": label,
                    "category": "Price range",
                }
            )

    return suggestions[:SUGGESTION_LIMIT]


async def search_suggestions(db: AsyncSession, q: str | None) -> list[dict[str, Any]]:
    """Public typeahead over approved properties; short queries return nothing."""
    text = (q or "").strip().lower()
    if len(text) < SUGGESTION_MIN_CHARS:
        return []

    predicate = role_predicate(ANONYMOUS, ListingQuery()).search(
        ("location_state", "location_city", "location_neigh"), text
    )
    stmt = (
        select(Property.location_state, Property.location_city, Property.location_neigh)
        .where(*predicate.to_clauses(Property))
        .distinct()
        .order_by(Property.location_state, Property.location_city, Property.location_neigh)
        .limit(SUGGESTION_LOCATION_ROWS)
    )
    rows = [tuple(r) for r in (await db.execute(stmt)).all()]
    return build_search_suggestions(text, rows)


async def property_stats(db: AsyncSession, actor: Actor) -> dict[str, Any]:
    if not actor.is_super_admin:
        raise AuthorizationError("Super admin role required")

    by_status = dict(
        (await db.execute(select(Property.status, func.count()).group_by(Property.status))).all()
    )
    total_value = (
        await db.execute(
            select(func.coalesce(func.sum(Property.price), 0)).where(
                Property.status == ListingStatus.APPROVED.value
            )
        )
    ).scalar_one()

    return {
        "total": sum(by_status.values()),
        "approved": by_status.get(ListingStatus.APPROVED.value, 0),
        "pending": by_status.get(ListingStatus.PENDING.value, 0),
        "rejected": by_status.get(ListingStatus.REJECTED.value, 0),
        "total_value": float(total_value),
    }
