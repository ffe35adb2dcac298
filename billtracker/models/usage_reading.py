"""UsageReading database model."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billtracker.core.database import Base

if TYPE_CHECKING:
    from billtracker.models.bill import Bill

UNIT_FIELDS = ("usage_kwh", "usage_therms", "usage_mcf", "usage_mmbtu")


class UsageReading(Base):
    """Energy consumed during a bill's period, at most one per bill."""

    __tablename__ = "usage_readings"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    bill_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bills.id", ondelete="CASCADE"), unique=True, index=True
    )

    usage_kwh: Mapped[Decimal | None] = mapped_column(Numeric(precision=14, scale=3), nullable=True)
    usage_therms: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=14, scale=3), nullable=True
    )
    usage_mcf: Mapped[Decimal | None] = mapped_column(Numeric(precision=14, scale=3), nullable=True)
    usage_mmbtu: Mapped[Decimal | None] = mapped_column(
        Numeric(precision=14, scale=3), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    # Relationships
    bill: Mapped["Bill"] = relationship(back_populates="usage")
