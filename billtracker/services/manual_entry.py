"""Hand-typed bills: standalone entry against an existing building meter."""

import logging
import uuid

from pydantic import ValidationError
from sqlalchemy.orm import Session

from billtracker.core.errors import NotFound, ValidationFailed
from billtracker.models.building import Building
from billtracker.models.enums import UtilityType
from billtracker.models.meter import Meter
from billtracker.models.user import User
from billtracker.schemas.bill import NewBillEntry
from billtracker.schemas.ingest import InboundItem, IngestRequest, IngestResponse
from billtracker.services.access import get_buildings_for_user, require_building
from billtracker.services.ingest import format_validation_error, ingest_bills
from billtracker.services.meter import get_meter, get_meters_for_building

logger = logging.getLogger(__name__)

# Usage fields offered for each utility on the entry form.
USAGE_FIELDS_BY_UTILITY = {
    UtilityType.ELECTRIC: ("usage_kwh",),
    UtilityType.GAS: ("usage_therms", "usage_mcf", "usage_mmbtu"),
}


def build_item(fields: dict) -> InboundItem:
    """Validate hand-typed fields as an ingestion item."""
    try:
        return InboundItem.model_validate(fields)
    except ValidationError as exc:
        raise ValidationFailed(format_validation_error(exc)) from exc


def get_entry_choices(db: Session, user: User) -> tuple[list[Building], list[Meter]]:
    """Buildings the user may access and their meters, for the entry form."""
    buildings = get_buildings_for_user(db, user)
    meters: list[Meter] = []
    for building in buildings:
        meters.extend(get_meters_for_building(db, building.id))
    return buildings, meters


def choose_meter(
    db: Session,
    building_id: uuid.UUID,
    utility: UtilityType,
    meter_id: uuid.UUID | None,
) -> Meter:
    """Resolve the meter for an entry; a lone meter of the utility is picked automatically."""
    if meter_id is not None:
        meter = get_meter(db, meter_id)
        if meter is None or meter.building_id != building_id:
            raise NotFound("Meter not found in this building")
        if meter.utility != utility:
            raise ValidationFailed(
                f"Meter {meter.label} measures {UtilityType(meter.utility).value}, "
                f"not {utility.value}"
            )
        return meter

    candidates = [m for m in get_meters_for_building(db, building_id) if m.utility == utility]
    if not candidates:
        raise ValidationFailed("No meters for that utility in this building")
    if len(candidates) > 1:
        raise ValidationFailed("Select a meter")
    return candidates[0]


def enter_new_bill(db: Session, user: User, entry: NewBillEntry) -> IngestResponse:
    """Record a bill for one of a building's meters.

    Missing fields are reported in form order: building, utility, meter,
    billing period, total cost.
    """
    if entry.building_id is None:
        raise ValidationFailed("Select a building")
    if entry.utility is None:
        raise ValidationFailed("Choose Electric or Gas")
    require_building(db, user, entry.building_id)
    meter = choose_meter(db, entry.building_id, entry.utility, entry.meter_id)
    if entry.period_start is None or entry.period_end is None:
        raise ValidationFailed("Enter billing period")
    if entry.total_cost is None:
        raise ValidationFailed("Enter total cost")

    fields = {
        "building_id": entry.building_id,
        "meter_label": meter.label,
        "period_start": entry.period_start,
        "period_end": entry.period_end,
        "total_cost": entry.total_cost,
        "demand_cost": entry.demand_cost,
    }
    for name in USAGE_FIELDS_BY_UTILITY[entry.utility]:
        fields[name] = getattr(entry, name)

    response = ingest_bills(
        db,
        user,
        IngestRequest(utility=entry.utility, items=[build_item(fields)]),
    )
    logger.info("Manual bill %s entered for meter %s", response.results[0].bill_id, meter.id)
    return response
