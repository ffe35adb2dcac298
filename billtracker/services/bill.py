"""Bill matching by meter and period, and usage reading upserts."""

import logging
import uuid
from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session, selectinload

from billtracker.core.database import persistence_step
from billtracker.models.bill import Bill
from billtracker.models.meter import Meter
from billtracker.models.usage_reading import UNIT_FIELDS, UsageReading

logger = logging.getLogger(__name__)


def find_bill_for_period(
    db: Session,
    meter_id: uuid.UUID,
    period_start: date,
    period_end: date,
) -> Bill | None:
    """Get the bill for a meter with exactly this billing period."""
    with persistence_step(db, "Bill lookup"):
        return (
            db.query(Bill)
            .filter(
                Bill.meter_id == meter_id,
                Bill.period_start == period_start,
                Bill.period_end == period_end,
            )
            .first()
        )


def create_bill(
    db: Session,
    meter: Meter,
    period_start: date,
    period_end: date,
    total_cost: Decimal | None,
    demand_cost: Decimal | None,
    bill_upload_id: uuid.UUID | None = None,
) -> Bill:
    """Insert a bill for a meter. Flushed, not committed."""
    bill = Bill(
        meter_id=meter.id,
        building_id=meter.building_id,
        bill_upload_id=bill_upload_id,
        period_start=period_start,
        period_end=period_end,
        total_cost=total_cost,
        demand_cost=demand_cost,
    )
    with persistence_step(db, "Bill insert"):
        db.add(bill)
        db.flush()
    logger.info(
        "Created bill %s for meter %s (%s to %s)", bill.id, meter.id, period_start, period_end
    )
    return bill


def update_bill(
    db: Session,
    bill: Bill,
    total_cost: Decimal | None,
    demand_cost: Decimal | None,
    bill_upload_id: uuid.UUID | None = None,
) -> Bill:
    """Overwrite a bill's costs and upload link with the latest submission."""
    with persistence_step(db, "Bill update"):
        bill.total_cost = total_cost
        bill.demand_cost = demand_cost
        bill.bill_upload_id = bill_upload_id
        db.flush()
    return bill


def find_or_create_bill(
    db: Session,
    meter: Meter,
    period_start: date,
    period_end: date,
    total_cost: Decimal | None,
    demand_cost: Decimal | None,
    bill_upload_id: uuid.UUID | None = None,
) -> tuple[Bill, bool]:
    """Update the bill matching (meter, period) or insert a new one."""
    bill = find_bill_for_period(db, meter.id, period_start, period_end)
    if bill is not None:
        return update_bill(db, bill, total_cost, demand_cost, bill_upload_id), False
    bill = create_bill(
        db, meter, period_start, period_end, total_cost, demand_cost, bill_upload_id
    )
    return bill, True


def _insert_for(db: Session):
    if db.get_bind().dialect.name == "postgresql":
        return postgresql.insert
    return sqlite.insert


def upsert_usage_reading(
    db: Session,
    bill_id: uuid.UUID,
    usage: dict[str, Decimal | None],
) -> None:
    """Insert or replace the single usage reading of a bill.

    Every unit column is written: those missing from ``usage`` become NULL.
    """
    values = {field: usage.get(field) for field in UNIT_FIELDS}
    insert = _insert_for(db)
    stmt = insert(UsageReading).values(bill_id=bill_id, **values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[UsageReading.bill_id],
        set_={**values, "updated_at": datetime.now(UTC)},
    )
    with persistence_step(db, "Usage reading upsert"):
        db.execute(stmt)


def get_usage_reading(db: Session, bill_id: uuid.UUID) -> UsageReading | None:
    """Get the usage reading of a bill."""
    return db.query(UsageReading).filter(UsageReading.bill_id == bill_id).first()


def get_bills_for_building(
    db: Session,
    building_id: uuid.UUID,
    limit: int = 24,
) -> list[Bill]:
    """Get a building's bills, newest period first."""
    return (
        db.query(Bill)
        .options(selectinload(Bill.usage))
        .filter(Bill.building_id == building_id)
        .order_by(Bill.period_start.desc(), Bill.period_end.desc())
        .limit(limit)
        .all()
    )
