"""Bill database model."""

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billtracker.core.database import Base

if TYPE_CHECKING:
    from billtracker.models.bill_upload import BillUpload
    from billtracker.models.building import Building
    from billtracker.models.meter import Meter
    from billtracker.models.usage_reading import UsageReading


class Bill(Base):
    """One billing period for one meter."""

    __tablename__ = "bills"
    __table_args__ = (
        UniqueConstraint(
            "meter_id", "period_start", "period_end", name="uq_bill_meter_period"
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    meter_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("meters.id", ondelete="CASCADE"), index=True
    )
    # Denormalized from the meter for per-building listings
    building_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("buildings.id", ondelete="CASCADE"), index=True
    )
    bill_upload_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("bill_uploads.id", ondelete="SET NULL"), nullable=True
    )
    period_start: Mapped[date] = mapped_column(index=True)
    period_end: Mapped[date]
    total_cost: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=2), nullable=True
    )
    demand_cost: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=12, scale=2), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    meter: Mapped["Meter"] = relationship(back_populates="bills")
    building: Mapped["Building"] = relationship(back_populates="bills")
    bill_upload: Mapped["BillUpload | None"] = relationship()
    usage: Mapped["UsageReading | None"] = relationship(
        back_populates="bill", cascade="all, delete-orphan", uselist=False
    )
