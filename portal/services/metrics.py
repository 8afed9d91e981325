"""
Role-scoped dashboard numbers.

Counts reuse the visibility role rule, so an agent's dashboard covers its own
listings, an agency admin's covers the agency and the super admin's covers
everything. Queries run one after another on the request's session.
"""
from __future__ import annotations

import math
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.config import settings
from portal.core.errors import AuthorizationError, NotFoundError
from portal.models.agency import Agency
from portal.models.enums import ListingStatus, UserRole
from portal.models.listing import Project, Property
from portal.models.user import User
from portal.schemas.listing_query import ListingQuery
from portal.schemas.metrics import (
    AgencyInfo,
    AgentStats,
    MetricsOut,
    PlatformStats,
    RecentListing,
    StatusStats,
    TopAgent,
)
from portal.services.auth import Actor
from portal.services.visibility import PROJECT_RESOURCE, PROPERTY_RESOURCE, ListingResource, Predicate, role_predicate

TOP_AGENTS_LIMIT = 5


def approval_rate(approved: int, total: int) -> int:
    """Whole percent of approved listings, halves rounded up. 0 when there are none."""
    if total <= 0:
        return 0
    return int(math.floor(approved / total * 100 + 0.5))


def status_stats(by_status: dict[str, int]) -> StatusStats:
    approved = by_status.get(ListingStatus.APPROVED.value, 0)
    total = sum(by_status.values())
    return StatusStats(
        total=total,
        approved=approved,
        pending=by_status.get(ListingStatus.PENDING.value, 0),
        rejected=by_status.get(ListingStatus.REJECTED.value, 0),
        approval_rate=approval_rate(approved, total),
    )


async def count_by_status(db: AsyncSession, model: type, predicate: Predicate) -> dict[str, int]:
    stmt = (
        select(model.status, func.count())
        .where(*predicate.to_clauses(model))
        .group_by(model.status)
    )
    return {status: count for status, count in (await db.execute(stmt)).all()}


async def _recent(db: AsyncSession, resource: ListingResource, predicate: Predicate, limit: int) -> list[RecentListing]:
    model = resource.model
    stmt = (
        select(model)
        .where(*predicate.to_clauses(model))
        .order_by(model.created_at.desc(), model.id)
        .limit(limit)
    )
    rows = (await db.execute(stmt)).unique().scalars().all()
    return [
        RecentListing(
            id=r.id,
            kind=resource.name,
            title=getattr(r, resource.title_field),
            agent=r.agent.full_name if r.agent else "",
            agency=r.agency.name if r.agency else None,
            status=r.status,
            created_at=r.created_at,
        )
        for r in rows
    ]


async def recent_listings(db: AsyncSession, predicate: Predicate, limit: int) -> list[RecentListing]:
    """The ``limit`` newest properties and projects together, newest first."""
    merged = await _recent(db, PROPERTY_RESOURCE, predicate, limit)
    merged += await _recent(db, PROJECT_RESOURCE, predicate, limit)
    merged.sort(key=lambda r: r.created_at, reverse=True)
    return merged[:limit]


async def platform_stats(db: AsyncSession) -> PlatformStats:
    total_agencies, active_agencies = (
        await db.execute(select(func.count(), func.count().filter(Agency.active.is_(True))).select_from(Agency))
    ).one()

    by_role = dict(
        (
            await db.execute(
                select(User.role, func.count())
                .where(User.role != UserRole.SUPER_ADMIN.value)
                .group_by(User.role)
            )
        ).all()
    )
    return PlatformStats(
        total_agencies=total_agencies,
        active_agencies=active_agencies,
        total_users=sum(by_role.values()),
        total_agents=by_role.get(UserRole.AGENT.value, 0),
        total_agency_admins=by_role.get(UserRole.AGENCY_ADMIN.value, 0),
    )


async def agency_overview(db: AsyncSession, agency_id: str) -> tuple[AgencyInfo, AgentStats, list[TopAgent]]:
    agency = await db.get(Agency, agency_id)
    if agency is None:
        raise NotFoundError("Agency not found")

    total_agents, active_agents = (
        await db.execute(
            select(func.count(), func.count().filter(User.active.is_(True)))
            .select_from(User)
            .where(User.agency_id == agency_id, User.role == UserRole.AGENT.value)
        )
    ).one()

    # columns only; selecting the User entity would drag its joined agency into the GROUP BY
    properties_count = func.count(Property.id).label("properties_count")
    top_stmt = (
        select(User.id, User.first_name, User.last_name, User.active, properties_count)
        .outerjoin(Property, Property.agent_id == User.id)
        .where(User.agency_id == agency_id, User.role == UserRole.AGENT.value)
        .group_by(User.id)
        .order_by(properties_count.desc(), User.id)
        .limit(TOP_AGENTS_LIMIT)
    )
    top = [
        TopAgent(
            id=user_id,
            name=" ".join(p for p in (first, last) if p),
            properties_count=count,
            active=active,
        )
        for user_id, first, last, active, count in (await db.execute(top_stmt)).all()
    ]

    return (
        AgencyInfo(id=agency.id, name=agency.name, logo_url=agency.logo_url),
        AgentStats(total_agents=total_agents, active_agents=active_agents),
        top,
    )


async def dashboard(db: AsyncSession, actor: Actor) -> MetricsOut:
    if actor.is_anonymous:
        raise AuthorizationError("Metrics require an authenticated user")

    predicate = role_predicate(actor, ListingQuery())
    out: dict[str, Any] = {
        "role": actor.role.value,
        "property_stats": status_stats(await count_by_status(db, Property, predicate)),
        "project_stats": status_stats(await count_by_status(db, Project, predicate)),
        "recent_listings": await recent_listings(db, predicate, settings.recent_listings_limit),
    }

    if actor.is_super_admin:
        out["platform_stats"] = await platform_stats(db)
    elif actor.is_agency_admin:
        info, agents, top = await agency_overview(db, actor.agency_id)
        out["agency_info"] = info
        out["agent_stats"] = agents
        out["top_agents"] = top

    return MetricsOut(**out)
