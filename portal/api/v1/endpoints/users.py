import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Body, Depends
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.db import get_db
from portal.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from portal.core.security import generate_api_key
from portal.models.agency import Agency
from portal.models.api_key import ApiKey
from portal.models.enums import UserRole
from portal.models.user import User
from portal.schemas.user import ApiKeyCreated, UserCreate, UserCreated, UserOut, UserUpdate
from portal.services.audit import audit
from portal.services.auth import Actor, get_actor, require_admin
from portal.services.validation import validate_or_raise

log = logging.getLogger(__name__)
router = APIRouter()


def user_out(u: User) -> UserOut:
    return UserOut(
        id=u.id,
        external_id=u.external_id,
        email=u.email,
        first_name=u.first_name,
        last_name=u.last_name,
        phone=u.phone,
        role=u.role,
        agency_id=u.agency_id,
        active=u.active,
        created_at=u.created_at,
    )


def new_key_row(user_id: str) -> tuple[ApiKey, str]:
    key = generate_api_key()
    row = ApiKey(user_id=user_id, key_prefix=key.prefix, key_hash=key.hashed, is_active=True)
    return row, key.plain


def _assert_user_scope(actor: Actor, user: User) -> None:
    if actor.is_super_admin:
        return
    if actor.is_agency_admin and user.agency_id == actor.agency_id and user.role == UserRole.AGENT.value:
        return
    raise AuthorizationError("Cross-agency access forbidden")


async def _target_agency(db: AsyncSession, actor: Actor, data: UserCreate) -> str:
    if data.role == UserRole.SUPER_ADMIN:
        raise AuthorizationError("Super admins are created through bootstrap only")

    if actor.is_agency_admin:
        if data.role != UserRole.AGENT:
            raise AuthorizationError("Agency admins can only create agents")
        if data.agency_id and data.agency_id != actor.agency_id:
            raise AuthorizationError("Cross-agency access forbidden")
        return actor.agency_id

    if not data.agency_id:
        raise ValidationError(
            "Validation failed",
            details=[{"field": "agency_id", "type": "missing", "message": "agency is required"}],
        )
    agency = await db.get(Agency, data.agency_id)
    if not agency:
        raise NotFoundError("Agency not found")
    if not agency.active:
        raise ValidationError("Agency is inactive")
    return agency.id


@router.post("/users", response_model=UserCreated, status_code=201)
async def create_user(
    payload: dict = Body(...),
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserCreated:
    data = validate_or_raise(UserCreate, payload)
    agency_id = await _target_agency(db, actor, data)

    user = User(
        external_id=data.external_id,
        email=str(data.email),
        first_name=data.first_name,
        last_name=data.last_name,
        phone=data.phone,
        role=data.role.value,
        agency_id=agency_id,
        created_by=actor.user_id,
        updated_by=actor.user_id,
    )

    try:
        db.add(user)
        await db.flush()  # user row must exist before its key
        key_row, plain = new_key_row(user.id)
        db.add(key_row)
        await audit(
            db,
            agency_id=agency_id,
            actor_user_id=actor.user_id,
            action="user.created",
            target_type="user",
            target_id=user.id,
            detail={"role": user.role},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.exception("create user failed: integrity error")
        raise ConflictError("A user with this external id already exists")

    await db.refresh(user)
    log.info("user %s (%s) created in agency %s by %s", user.id, user.role, agency_id, actor.user_id)
    return UserCreated(
        user=user_out(user),
        api_key=ApiKeyCreated(id=key_row.id, plain_key=plain, key_prefix=key_row.key_prefix, user_id=user.id),
    )


@router.get("/users", response_model=list[UserOut])
async def list_users(
    agency_id: str | None = None,
    role: UserRole | None = None,
    active: bool | None = None,
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> list[UserOut]:
    stmt = select(User)
    if actor.is_agency_admin:
        stmt = stmt.where(User.agency_id == actor.agency_id)
    elif agency_id:
        stmt = stmt.where(User.agency_id == agency_id)
    if role:
        stmt = stmt.where(User.role == role.value)
    if active is not None:
        stmt = stmt.where(User.active.is_(active))

    users = (await db.execute(stmt.order_by(User.created_at.desc(), User.id))).unique().scalars().all()
    return [user_out(u) for u in users]


@router.get("/users/{user_id}", response_model=UserOut)
async def get_user(
    user_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> UserOut:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.id != actor.user_id:
        _assert_user_scope(actor, user)
    return user_out(user)


@router.patch("/users/{user_id}", response_model=UserOut)
async def update_user(
    user_id: str,
    payload: dict = Body(...),
    actor: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> UserOut:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    _assert_user_scope(actor, user)

    data = validate_or_raise(UserUpdate, payload)
    changes = data.model_dump(exclude_unset=True)
    if changes.get("active") is None:
        changes.pop("active", None)
    if user.id == actor.user_id and changes.get("active") is False:
        raise ValidationError("You cannot deactivate your own account")

    for key, value in changes.items():
        setattr(user, key, value)
    user.updated_by = actor.user_id

    await audit(
        db,
        agency_id=user.agency_id,
        actor_user_id=actor.user_id,
        action="user.updated",
        target_type="user",
        target_id=user.id,
        detail={"fields": sorted(changes)},
    )
    await db.commit()
    await db.refresh(user)
    return user_out(user)


@router.post("/users/{user_id}/rotate-key", response_model=ApiKeyCreated)
async def rotate_user_key(
    user_id: str,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> ApiKeyCreated:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    if user.id != actor.user_id:
        _assert_user_scope(actor, user)

    # Disable previous keys
    await db.execute(
        update(ApiKey)
        .where(ApiKey.user_id == user.id, ApiKey.is_active == True)  # noqa: E712
        .values(is_active=False, rotated_at=datetime.now(timezone.utc))
    )

    key_row, plain = new_key_row(user.id)
    try:
        db.add(key_row)
        await audit(
            db,
            agency_id=user.agency_id,
            actor_user_id=actor.user_id,
            action="user.key_rotated",
            target_type="user",
            target_id=user.id,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.exception("rotate key failed")
        raise ConflictError("Constraint violation")

    log.info("api key rotated for user %s by %s", user.id, actor.user_id)
    return ApiKeyCreated(id=key_row.id, plain_key=plain, key_prefix=key_row.key_prefix, user_id=user.id)
