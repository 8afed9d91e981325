import logging

from fastapi import APIRouter, Body, Depends
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from portal.api.v1.endpoints.users import new_key_row, user_out
from portal.core.db import get_db
from portal.core.errors import ConflictError
from portal.models.enums import UserRole
from portal.models.user import User
from portal.schemas.user import ApiKeyCreated, SuperAdminBootstrap, UserCreated
from portal.services.audit import audit
from portal.services.internal_admin import require_internal_admin
from portal.services.validation import validate_or_raise

log = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/bootstrap/super-admin",
    response_model=UserCreated,
    status_code=201,
    dependencies=[Depends(require_internal_admin)],
)
async def bootstrap_super_admin(payload: dict = Body(...), db: AsyncSession = Depends(get_db)) -> UserCreated:
    """
    One-time creation of the platform super admin.
    Protected by the internal admin key; audited as "internal".
    """
    data = validate_or_raise(SuperAdminBootstrap, payload)

    existing = (
        await db.execute(select(User.id).where(User.role == UserRole.SUPER_ADMIN.value).limit(1))
    ).scalar_one_or_none()
    if existing:
        raise ConflictError("A super admin already exists")

    user = User(
        external_id=data.external_id,
        email=str(data.email),
        first_name=data.first_name,
        last_name=data.last_name,
        role=UserRole.SUPER_ADMIN.value,
        agency_id=None,
        created_by="internal",
        updated_by="internal",
    )

    try:
        db.add(user)
        await db.flush()
        key_row, plain = new_key_row(user.id)
        db.add(key_row)
        await audit(
            db,
            agency_id=None,
            actor_user_id="internal",
            action="bootstrap.super_admin",
            target_type="user",
            target_id=user.id,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        log.exception("bootstrap failed: integrity error")
        raise ConflictError("Constraint violation")

    await db.refresh(user)
    log.info("super admin %s bootstrapped", user.id)
    return UserCreated(
        user=user_out(user),
        api_key=ApiKeyCreated(id=key_row.id, plain_key=plain, key_prefix=key_row.key_prefix, user_id=user.id),
    )
