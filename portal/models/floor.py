from sqlalchemy import Boolean, Float, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core import ids
from portal.core.ids import gen_id
from portal.models.base import AuditMixin, Base
from portal.models.enums import QuadrantStatus, QuadrantType


class Floor(AuditMixin, Base):
    __tablename__ = "floors"
    __table_args__ = (
        UniqueConstraint("project_id", "number", name="uq_floor_number_per_project"),
    )

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id(ids.FLOOR))
    project_id: Mapped[str] = mapped_column(String, ForeignKey("projects.id"), nullable=False, index=True)
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str | None] = mapped_column(String(50), nullable=True)

    project = relationship("Project", back_populates="floors")
    quadrants = relationship(
        "Quadrant",
        back_populates="floor",
        order_by="Quadrant.custom_id",
        lazy="selectin",
        cascade="all, delete-orphan",
    )


class Quadrant(AuditMixin, Base):
    """A sellable/rentable unit on a floor. Its status is not part of the approval lifecycle."""

    __tablename__ = "quadrants"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id(ids.QUADRANT))
    floor_id: Mapped[str] = mapped_column(String, ForeignKey("floors.id"), nullable=False, index=True)

    custom_id: Mapped[str] = mapped_column(String(50), nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False, default=QuadrantType.DEPARTAMENTO.value)
    area: Mapped[float] = mapped_column(Float, nullable=False)
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(20), nullable=False)
    exchange_rate: Mapped[float | None] = mapped_column(Float, nullable=True)

    # "AVAILABLE" | "UNAVAILABLE" | "RESERVED"
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=QuadrantStatus.AVAILABLE.value)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    floor = relationship("Floor", back_populates="quadrants")
