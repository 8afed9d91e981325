from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portal.core import ids
from portal.core.ids import gen_id
from portal.models.base import Base, AuditMixin


class User(AuditMixin, Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id(ids.USER))

    # Principal id issued by the identity provider (1:1 with this row)
    external_id: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)

    email: Mapped[str] = mapped_column(String(320), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)

    # "SUPER_ADMIN" | "AGENCY_ADMIN" | "AGENT"
    role: Mapped[str] = mapped_column(String(30), nullable=False)

    # null only for SUPER_ADMIN
    agency_id: Mapped[str | None] = mapped_column(String, ForeignKey("agencies.id"), nullable=True, index=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    agency = relationship("Agency", lazy="joined")

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)
