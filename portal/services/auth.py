import logging
from dataclasses import dataclass

from fastapi import Depends, Security
from fastapi.security.api_key import APIKeyHeader
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from portal.core.db import get_db
from portal.core.errors import AuthenticationError, AuthorizationError
from portal.core.security import hash_api_key
from portal.models.api_key import ApiKey
from portal.models.enums import UserRole

log = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


@dataclass(frozen=True)
class Actor:
    """The requester every core operation is evaluated against.

    Anonymous callers have no user and no role. Agents and agency admins carry
    their agency id; the super admin never does.
    """

    user_id: str | None
    role: UserRole | None
    agency_id: str | None = None
    api_key_id: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.role is None

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @property
    def is_agency_admin(self) -> bool:
        return self.role == UserRole.AGENCY_ADMIN

    @property
    def is_agent(self) -> bool:
        return self.role == UserRole.AGENT


ANONYMOUS = Actor(user_id=None, role=None)


async def _resolve_actor(api_key: str, db: AsyncSession) -> Actor:
    hashed = hash_api_key(api_key)
    stmt = select(ApiKey).where(ApiKey.key_hash == hashed, ApiKey.is_active.is_(True))
    row = (await db.execute(stmt)).scalar_one_or_none()
    if not row:
        raise AuthenticationError("Invalid API key")

    user = row.user
    if not user.active:
        log.warning("disabled user %s presented api key %s", user.id, row.key_prefix)
        raise AuthenticationError("User account is disabled")

    return Actor(
        user_id=user.id,
        role=UserRole(user.role),
        agency_id=user.agency_id,
        api_key_id=row.id,
    )


async def get_actor(
    api_key: str | None = Security(api_key_header),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    if not api_key:
        raise AuthenticationError("Missing X-API-Key")
    return await _resolve_actor(api_key, db)


async def get_optional_actor(
    api_key: str | None = Security(api_key_header),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    # Public endpoints: no key means anonymous, a bad key is still an error.
    if not api_key:
        return ANONYMOUS
    return await _resolve_actor(api_key, db)


def require_super_admin(actor: Actor = Depends(get_actor)) -> Actor:
    if not actor.is_super_admin:
        raise AuthorizationError("Super admin role required")
    return actor


def require_admin(actor: Actor = Depends(get_actor)) -> Actor:
    if not (actor.is_super_admin or actor.is_agency_admin):
        raise AuthorizationError("Agency admin or super admin role required")
    return actor


def require_agent(actor: Actor = Depends(get_actor)) -> Actor:
    if not actor.is_agent:
        raise AuthorizationError("Agent role required")
    return actor
