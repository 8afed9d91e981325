from datetime import datetime

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from portal.models.enums import ListingStatus


class Base(DeclarativeBase):
    pass

class AuditMixin:
    # fetch server-side timestamps after INSERT/UPDATE so async code never lazy-loads them
    __mapper_args__ = {"eager_defaults": True}

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # User.id that created/updated the record (or "internal")
    created_by: Mapped[str | None] = mapped_column(nullable=True)
    updated_by: Mapped[str | None] = mapped_column(nullable=True)


class ApprovalMixin:
    """Ownership + approval lifecycle columns shared by properties and projects."""

    agent_id: Mapped[str] = mapped_column(String, ForeignKey("users.id"), nullable=False, index=True)
    agency_id: Mapped[str] = mapped_column(String, ForeignKey("agencies.id"), nullable=False, index=True)

    # "PENDING" | "APPROVED" | "REJECTED"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=ListingStatus.PENDING.value, index=True)

    # only set while status == REJECTED
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    status_changed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reviewed_by: Mapped[str | None] = mapped_column(String, nullable=True)
