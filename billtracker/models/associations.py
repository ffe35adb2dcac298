"""Association tables for many-to-many relationships."""

from sqlalchemy import Column, ForeignKey, String, Table

from billtracker.core.database import Base

# Many-to-many: User <-> Organization
organization_memberships = Table(
    "organization_memberships",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "organization_id",
        ForeignKey("organizations.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("role", String(20), nullable=False, default="member"),
)
