from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from portal.models.audit_log import AuditLog

async def audit(
    db: AsyncSession,
    *,
    agency_id: str | None,
    actor_user_id: str | None,
    action: str,
    target_type: str | None = None,
    target_id: str | None = None,
    detail: dict | None = None,
) -> None:
    db.add(AuditLog(
        agency_id=agency_id,
        actor_user_id=actor_user_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        detail=detail or {},
    ))
