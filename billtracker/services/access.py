"""Organization membership checks."""

import uuid
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from billtracker.core.errors import AccessDenied, NotFound
from billtracker.models.associations import organization_memberships
from billtracker.models.building import Building
from billtracker.models.user import User


def get_organization_ids_for_user(db: Session, user_id: uuid.UUID) -> set[uuid.UUID]:
    """Get the IDs of all organizations a user belongs to."""
    rows = db.execute(
        select(organization_memberships.c.organization_id).where(
            organization_memberships.c.user_id == user_id
        )
    )
    return {row[0] for row in rows}


def get_buildings_for_user(db: Session, user: User) -> list[Building]:
    """Get all buildings owned by the user's organizations."""
    org_ids = get_organization_ids_for_user(db, user.id)
    if not org_ids:
        return []
    return (
        db.query(Building)
        .filter(Building.organization_id.in_(org_ids))
        .order_by(Building.name)
        .all()
    )


def require_buildings(
    db: Session,
    user: User,
    building_ids: Iterable[uuid.UUID],
) -> dict[uuid.UUID, Building]:
    """Load buildings by ID, checking that each exists and the user may access it."""
    wanted = set(building_ids)
    buildings: dict[uuid.UUID, Building] = {}
    if wanted:
        for building in db.query(Building).filter(Building.id.in_(wanted)).all():
            buildings[building.id] = building

    missing = wanted - buildings.keys()
    if missing:
        raise NotFound(f"Building {sorted(str(m) for m in missing)[0]} not found")

    org_ids = get_organization_ids_for_user(db, user.id)
    for building in buildings.values():
        if building.organization_id not in org_ids:
            raise AccessDenied(f"Not a member of the organization owning building {building.id}")
    return buildings


def require_building(db: Session, user: User, building_id: uuid.UUID) -> Building:
    """Load one building the user may access."""
    return require_buildings(db, user, [building_id])[building_id]
