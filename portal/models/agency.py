from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from portal.core import ids
from portal.core.ids import gen_id
from portal.models.base import Base, AuditMixin


class Agency(AuditMixin, Base):
    __tablename__ = "agencies"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: gen_id(ids.AGENCY))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(40), nullable=True)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    logo_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
