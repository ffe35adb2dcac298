"""Bulk bill ingestion: reconcile parsed bill line items against meters and bills.

Each item is matched in three steps:

1. Meter by (building, normalized label) - created when absent, its provider
   refreshed when a different one is supplied.
2. Bill by (meter, exact period start, exact period end) - costs updated in
   place when found, inserted otherwise.
3. Usage reading by bill - upserted when the item carries any quantity.

The whole batch is validated before anything is written. Items are then
processed in input order and committed one at a time, so a persistence
failure on item N leaves items 0..N-1 in place.
"""

import logging
import uuid
from decimal import ROUND_HALF_UP, Decimal

from pydantic import ValidationError
from sqlalchemy.orm import Session

from billtracker.core.database import persistence_step
from billtracker.core.errors import NotFound, ValidationFailed
from billtracker.models.bill_upload import BillUpload
from billtracker.models.enums import UtilityType
from billtracker.models.user import User
from billtracker.schemas.ingest import (
    InboundItem,
    IngestItemResult,
    IngestRequest,
    IngestResponse,
    IngestSummary,
)
from billtracker.services.access import require_buildings
from billtracker.services.bill import find_or_create_bill, upsert_usage_reading
from billtracker.services.meter import find_or_create_meter, normalize_meter_label

logger = logging.getLogger(__name__)

CCF_PER_MCF = Decimal("10")
_THOUSANDTHS = Decimal("0.001")


def format_validation_error(exc: ValidationError) -> str:
    """Describe the first problem of a pydantic validation error."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    message = first["msg"].removeprefix("Value error, ")
    return f"Invalid {location}: {message}" if location else message


def parse_ingest_request(payload: object) -> IngestRequest:
    """Validate a raw JSON body into an IngestRequest.

    Checks run in a fixed order so the first failure is reported: body shape,
    non-empty items, top-level utility, then each item in order.
    """
    if not isinstance(payload, dict):
        raise ValidationFailed("Request body must be a JSON object")

    raw_items = payload.get("items")
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationFailed("No items provided")

    utility = payload.get("utility")
    if utility not in {u.value for u in UtilityType}:
        raise ValidationFailed("Top-level 'utility' must be 'electric' or 'gas'.")

    items: list[InboundItem] = []
    for index, raw in enumerate(raw_items):
        if not isinstance(raw, dict):
            raise ValidationFailed(f"Item {index}: must be a JSON object")
        try:
            item = InboundItem.model_validate(raw)
        except ValidationError as exc:
            raise ValidationFailed(f"Item {index}: {format_validation_error(exc)}") from exc

        if item.building_id is None:
            raise ValidationFailed(f"Item {index}: missing buildingId")
        if item.period_start is None or item.period_end is None:
            raise ValidationFailed(f"Item {index}: missing period_start or period_end")
        if not item.meter_label or not normalize_meter_label(item.meter_label):
            raise ValidationFailed(f"Item {index}: missing meter_no")
        items.append(item)

    try:
        return IngestRequest(
            utility=utility,
            bill_upload_id=payload.get("billUploadId") or None,
            items=items,
        )
    except ValidationError as exc:
        raise ValidationFailed(format_validation_error(exc)) from exc


def resolve_usage(item: InboundItem, utility: UtilityType) -> dict[str, Decimal | None]:
    """Map an item's usage fields and aliases onto the stored unit columns.

    A generic ``usage`` value counts as kWh on electric batches and MCF on gas
    batches. CCF is converted to MCF when no MCF value is given.
    """
    usage_kwh = item.usage_kwh
    usage_mcf = item.usage_mcf

    if item.usage is not None:
        if utility == UtilityType.ELECTRIC and usage_kwh is None:
            usage_kwh = item.usage
        elif utility == UtilityType.GAS and usage_mcf is None:
            usage_mcf = item.usage

    if usage_mcf is None and item.usage_ccf is not None:
        usage_mcf = (item.usage_ccf / CCF_PER_MCF).quantize(
            _THOUSANDTHS, rounding=ROUND_HALF_UP
        )

    return {
        "usage_kwh": usage_kwh,
        "usage_therms": item.usage_therms,
        "usage_mcf": usage_mcf,
        "usage_mmbtu": item.usage_mmbtu,
    }


def reconcile_item(
    db: Session,
    index: int,
    item: InboundItem,
    utility: UtilityType,
    bill_upload_id: uuid.UUID | None = None,
) -> IngestItemResult:
    """Reconcile one validated item and commit it."""
    meter, _ = find_or_create_meter(
        db,
        building_id=item.building_id,
        label=item.meter_label,
        utility=utility,
        provider=item.utility_provider,
    )

    bill, created_bill = find_or_create_bill(
        db,
        meter,
        period_start=item.period_start,
        period_end=item.period_end,
        total_cost=item.total_cost,
        demand_cost=item.demand_cost,
        bill_upload_id=bill_upload_id,
    )

    usage = resolve_usage(item, utility)
    created_usage = any(value is not None for value in usage.values())
    if created_usage:
        upsert_usage_reading(db, bill.id, usage)

    result = IngestItemResult(
        index=index,
        building_id=meter.building_id,
        meter_id=meter.id,
        bill_id=bill.id,
        created_bill=created_bill,
        created_usage=created_usage,
    )
    with persistence_step(db, f"Item {index} commit"):
        db.commit()
    return result


def ingest_bills(db: Session, user: User, request: IngestRequest) -> IngestResponse:
    """Reconcile a validated batch for a user and summarize the outcome."""
    logger.info(
        "Ingesting %d %s bill item(s) for user %s",
        len(request.items),
        request.utility.value,
        user.id,
    )

    require_buildings(db, user, (item.building_id for item in request.items))

    if request.bill_upload_id is not None:
        upload = db.query(BillUpload).filter(BillUpload.id == request.bill_upload_id).first()
        if upload is None:
            raise NotFound(f"Bill upload {request.bill_upload_id} not found")
        require_buildings(db, user, [upload.building_id])

    results: list[IngestItemResult] = []
    for index, item in enumerate(request.items):
        results.append(
            reconcile_item(db, index, item, request.utility, request.bill_upload_id)
        )

    summary = IngestSummary(
        items_received=len(request.items),
        bills_created=sum(1 for r in results if r.created_bill),
        usage_rows_upserted=sum(1 for r in results if r.created_usage),
    )
    logger.info(
        "Ingested %d item(s): %d bill(s) created, %d usage row(s) upserted",
        summary.items_received,
        summary.bills_created,
        summary.usage_rows_upserted,
    )
    return IngestResponse(summary=summary, results=results)
