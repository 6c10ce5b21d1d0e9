"""
db/models/client.py

Client model: the livestock owner ("breeder") a field visit is recorded against.
"""

import uuid
from datetime import date

from sqlalchemy import Date, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatorMixin, TimestampMixin

ACTIVE_CLIENT_STATUS = "نشط"


class Client(Base, TimestampMixin, CreatorMixin):
    """
    Represents one livestock owner.

    national_id and phone are soft-unique matching keys: they are indexed for
    find-or-create lookups during imports but deliberately carry no unique
    constraint, so repeated imports may accumulate near-duplicate clients.
    """

    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    national_id: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        comment="National ID; synthesized from a timestamp when the source has none",
    )

    phone: Mapped[str] = mapped_column(String(32), nullable=False)

    village: Mapped[str | None] = mapped_column(String(255), nullable=True)

    detailed_address: Mapped[str | None] = mapped_column(String(500), nullable=True)

    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    holding_code: Mapped[str | None] = mapped_column(String(64), nullable=True)

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ACTIVE_CLIENT_STATUS,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_clients_national_id", "national_id"),
        Index("ix_clients_phone", "phone"),
        Index("ix_clients_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<Client id={self.id} name={self.name!r} national_id={self.national_id!r}>"
