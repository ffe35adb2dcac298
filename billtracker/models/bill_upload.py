"""BillUpload database model."""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billtracker.core.database import Base
from billtracker.models.enums import UploadStatus

if TYPE_CHECKING:
    from billtracker.models.building import Building
    from billtracker.models.meter import Meter
    from billtracker.models.user import User


class BillUpload(Base):
    """Source document (e.g. a scanned bill) awaiting manual entry."""

    __tablename__ = "bill_uploads"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    building_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("buildings.id", ondelete="CASCADE"), index=True
    )
    meter_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("meters.id", ondelete="SET NULL"), nullable=True
    )
    file_name: Mapped[str] = mapped_column(String(255))
    status: Mapped[UploadStatus] = mapped_column(
        String(20), default=UploadStatus.PENDING, index=True
    )
    uploaded_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))
    entered_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Relationships
    building: Mapped["Building"] = relationship()
    meter: Mapped["Meter | None"] = relationship()
    uploaded_by: Mapped["User | None"] = relationship()
