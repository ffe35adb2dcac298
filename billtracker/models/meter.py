"""Meter database model."""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billtracker.core.database import Base
from billtracker.models.enums import UtilityType

if TYPE_CHECKING:
    from billtracker.models.bill import Bill
    from billtracker.models.building import Building


class Meter(Base):
    """Utility meter, identified within its building by a normalized label."""

    __tablename__ = "meters"
    __table_args__ = (
        UniqueConstraint("building_id", "label", name="uq_building_meter_label"),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    building_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("buildings.id", ondelete="CASCADE"), index=True
    )
    label: Mapped[str] = mapped_column(String(100))
    utility: Mapped[UtilityType] = mapped_column(String(20), index=True)
    provider: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    building: Mapped["Building"] = relationship(back_populates="meters")
    bills: Mapped[list["Bill"]] = relationship(
        back_populates="meter", cascade="all, delete-orphan"
    )
