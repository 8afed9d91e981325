from fastapi import Header

from portal.core.config import settings
from portal.core.errors import AuthorizationError
from portal.core.security import constant_time_equals


async def require_internal_admin(x_internal_admin_key: str | None = Header(default=None)) -> None:
    if not x_internal_admin_key or not constant_time_equals(x_internal_admin_key, settings.internal_admin_key):
        raise AuthorizationError("Internal admin key required")
