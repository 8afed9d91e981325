import logging

from fastapi import APIRouter, Body, Depends
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.db import get_db
from portal.core.errors import AuthorizationError, ConflictError, NotFoundError
from portal.models.agency import Agency
from portal.models.listing import Property
from portal.models.user import User
from portal.schemas.agency import AgencyCreate, AgencyOut, AgencyPage, AgencyQuery, AgencyUpdate
from portal.services.audit import audit
from portal.services.auth import Actor, get_actor, require_super_admin
from portal.services.pagination import page_info
from portal.services.validation import agency_query, validate_or_raise

log = logging.getLogger(__name__)
router = APIRouter()


def _agency_out(a: Agency, user_count: int | None = None, property_count: int | None = None) -> AgencyOut:
    return AgencyOut(
        id=a.id,
        name=a.name,
        email=a.email,
        phone=a.phone,
        address=a.address,
        logo_url=a.logo_url,
        active=a.active,
        created_at=a.created_at,
        updated_at=a.updated_at,
        user_count=user_count,
        property_count=property_count,
    )


@router.post("/agencies", response_model=AgencyOut, status_code=201)
async def create_agency(
    payload: dict = Body(...),
    actor: Actor = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
) -> AgencyOut:
    data = validate_or_raise(AgencyCreate, payload)
    agency = Agency(
        name=data.name,
        email=str(data.email) if data.email else None,
        phone=data.phone,
        address=data.address,
        logo_url=data.logo_url,
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )

    try:
        db.add(agency)
        await db.flush()
        await audit(
            db,
            agency_id=agency.id,
            actor_user_id=actor.user_id,
            action="agency.created",
            target_type="agency",
            target_id=agency.id,
            detail={"name": agency.name},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.exception("create agency failed: integrity error")
        raise ConflictError("Constraint violation")

    await db.refresh(agency)
    log.info("agency %s created by %s", agency.id, actor.user_id)
    return _agency_out(agency, 0, 0)


@router.get("/agencies", response_model=AgencyPage)
async def list_agencies(
    query: AgencyQuery = Depends(agency_query),
    actor: Actor = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
) -> AgencyPage:
    clauses = []
    if query.active is not None:
        clauses.append(Agency.active.is_(query.active))
    if query.search and query.search.strip():
        pattern = f"%{query.search.strip()}%"
        clauses.append(or_(Agency.name.ilike(pattern), Agency.email.ilike(pattern)))

    total = (await db.execute(select(func.count()).select_from(Agency).where(*clauses))).scalar_one()
    info = page_info(total_count=total, limit=query.limit, offset=query.offset)

    user_count = (
        select(func.count(User.id)).where(User.agency_id == Agency.id).correlate(Agency).scalar_subquery()
    )
    property_count = (
        select(func.count(Property.id)).where(Property.agency_id == Agency.id).correlate(Agency).scalar_subquery()
    )
    order_col = Agency.name if query.sort_by == "name" else Agency.created_at
    stmt = (
        select(Agency, user_count, property_count)
        .where(*clauses)
        .order_by(order_col.desc() if query.sort_order == "desc" else order_col.asc(), Agency.id)
        .limit(info.limit)
        .offset(info.offset)
    )
    rows = (await db.execute(stmt)).all()

    return AgencyPage(
        agencies=[_agency_out(a, users, props) for a, users, props in rows],
        total_count=info.total_count,
        has_more=info.has_more,
        pagination=info.to_out(),
    )


@router.get("/agencies/{agency_id}", response_model=AgencyOut)
async def get_agency(
    agency_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> AgencyOut:
    if not actor.is_super_admin and actor.agency_id != agency_id:
        raise AuthorizationError("Cross-agency access forbidden")
    agency = await db.get(Agency, agency_id)
    if not agency:
        raise NotFoundError("Agency not found")
    return _agency_out(agency)


@router.patch("/agencies/{agency_id}", response_model=AgencyOut)
async def update_agency(
    agency_id: str,
    payload: dict = Body(...),
    actor: Actor = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
) -> AgencyOut:
    agency = await db.get(Agency, agency_id)
    if not agency:
        raise NotFoundError("Agency not found")

    data = validate_or_raise(AgencyUpdate, payload)
    changes = data.model_dump(mode="json", exclude_unset=True)
    for key in ("name", "active"):
        if key in changes and changes[key] is None:
            changes.pop(key)
    for key, value in changes.items():
        setattr(agency, key, value)
    agency.updated_by = actor.user_id

    await audit(
        db,
        agency_id=agency.id,
        actor_user_id=actor.user_id,
        action="agency.updated",
        target_type="agency",
        target_id=agency.id,
        detail={"fields": sorted(changes)},
    )
    await db.commit()
    await db.refresh(agency)

    if "active" in changes:
        log.info("agency %s active=%s set by %s", agency.id, agency.active, actor.user_id)
    return _agency_out(agency)
