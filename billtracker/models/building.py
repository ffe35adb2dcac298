"""Building database model."""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billtracker.core.database import Base

if TYPE_CHECKING:
    from billtracker.models.bill import Bill
    from billtracker.models.meter import Meter
    from billtracker.models.organization import Organization


class Building(Base):
    """Building that meters are installed in."""

    __tablename__ = "buildings"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    state: Mapped[str | None] = mapped_column(String(2), nullable=True)
    square_feet: Mapped[int | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    # Relationships
    organization: Mapped["Organization"] = relationship(back_populates="buildings")
    meters: Mapped[list["Meter"]] = relationship(
        back_populates="building", cascade="all, delete-orphan"
    )
    bills: Mapped[list["Bill"]] = relationship(back_populates="building")
