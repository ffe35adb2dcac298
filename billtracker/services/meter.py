"""Meter lookup and creation by natural key."""

import logging
import re
import uuid

from sqlalchemy.orm import Session

from billtracker.core.database import persistence_step
from billtracker.models.enums import UtilityType
from billtracker.models.meter import Meter

logger = logging.getLogger(__name__)

_LABEL_SEPARATORS = re.compile(r"[^0-9A-Za-z]+")


def normalize_meter_label(label: str) -> str:
    """Canonical form of a printed meter label: alphanumerics only, uppercased.

    " ab-12 ", "AB 12" and "ab.12" all normalize to "AB12".
    """
    return _LABEL_SEPARATORS.sub("", label).upper()


def get_meter_by_label(db: Session, building_id: uuid.UUID, label: str) -> Meter | None:
    """Get a building's meter by its normalized label."""
    with persistence_step(db, "Meter lookup"):
        return (
            db.query(Meter)
            .filter(
                Meter.building_id == building_id,
                Meter.label == normalize_meter_label(label),
            )
            .first()
        )


def create_meter(
    db: Session,
    building_id: uuid.UUID,
    label: str,
    utility: UtilityType,
    provider: str | None = None,
) -> Meter:
    """Create a meter in a building. Flushed, not committed."""
    meter = Meter(
        building_id=building_id,
        label=normalize_meter_label(label),
        utility=utility,
        provider=provider,
    )
    with persistence_step(db, "Meter insert"):
        db.add(meter)
        db.flush()
    logger.info("Created %s meter %s in building %s", utility.value, meter.label, building_id)
    return meter


def sync_meter_provider(db: Session, meter: Meter, provider: str | None) -> bool:
    """Store a newly supplied provider name; returns whether the meter changed."""
    if not provider or provider == meter.provider:
        return False
    with persistence_step(db, "Meter update"):
        meter.provider = provider
        db.flush()
    return True


def find_or_create_meter(
    db: Session,
    building_id: uuid.UUID,
    label: str,
    utility: UtilityType,
    provider: str | None = None,
) -> tuple[Meter, bool]:
    """Resolve a meter by (building, label), creating it when absent."""
    meter = get_meter_by_label(db, building_id, label)
    if meter is None:
        return create_meter(db, building_id, label, utility, provider), True
    sync_meter_provider(db, meter, provider)
    return meter, False


def get_meters_for_building(db: Session, building_id: uuid.UUID) -> list[Meter]:
    """Get all meters for a building."""
    return (
        db.query(Meter)
        .filter(Meter.building_id == building_id)
        .order_by(Meter.label)
        .all()
    )


def get_meter(db: Session, meter_id: uuid.UUID) -> Meter | None:
    """Get a meter by ID."""
    return db.query(Meter).filter(Meter.id == meter_id).first()
