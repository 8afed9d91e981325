from sqlalchemy import Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core import ids
from portal.core.ids import gen_id
from portal.models.base import ApprovalMixin, AuditMixin, Base


class Property(ApprovalMixin, AuditMixin, Base):
    __tablename__ = "properties"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id(ids.PROPERTY))

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # PropertyType / TransactionType values
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    transaction_type: Mapped[str] = mapped_column(String(30), nullable=False)

    address: Mapped[str] = mapped_column(String(300), nullable=False)
    location_state: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    location_city: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    location_neigh: Mapped[str | None] = mapped_column(String(120), nullable=True)
    municipality: Mapped[str | None] = mapped_column(String(120), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    google_maps_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    price: Mapped[float] = mapped_column(Float, nullable=False)
    currency: Mapped[str] = mapped_column(String(20), nullable=False, default="DOLLARS")
    bedrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bathrooms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    garage_spaces: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    square_meters: Mapped[float] = mapped_column(Float, nullable=False)

    # media are URL strings returned by object storage
    images: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    videos: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    features: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)

    agent = relationship("User", lazy="joined", foreign_keys="Property.agent_id")
    agency = relationship("Agency", lazy="joined", foreign_keys="Property.agency_id")


class Project(ApprovalMixin, AuditMixin, Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id(ids.PROJECT))

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False)

    images: Mapped[list[str]] = mapped_column(ARRAY(String), nullable=False, default=list)
    brochure_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    google_maps_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)

    agent = relationship("User", lazy="joined", foreign_keys="Project.agent_id")
    agency = relationship("Agency", lazy="joined", foreign_keys="Project.agency_id")
    floors = relationship(
        "Floor",
        back_populates="project",
        order_by="Floor.number",
        lazy="selectin",
        cascade="all, delete-orphan",
    )
