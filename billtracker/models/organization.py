"""Organization database model."""

import uuid
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billtracker.core.database import Base

if TYPE_CHECKING:
    from billtracker.models.building import Building
    from billtracker.models.user import User


class Organization(Base):
    """Tenant that owns buildings; users join through memberships."""

    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4, index=True)
    name: Mapped[str] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(default=lambda: datetime.now(UTC))

    # Relationships
    buildings: Mapped[list["Building"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan"
    )
    members: Mapped[list["User"]] = relationship(
        secondary="organization_memberships",
        back_populates="organizations",
    )
