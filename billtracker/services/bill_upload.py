"""Bill uploads awaiting manual entry."""

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from billtracker.core.database import persistence_step
from billtracker.core.errors import NotFound, ValidationFailed
from billtracker.models.bill_upload import BillUpload
from billtracker.models.building import Building
from billtracker.models.enums import UploadStatus, UtilityType
from billtracker.models.user import User
from billtracker.schemas.bill import ManualBillEntry
from billtracker.schemas.ingest import IngestRequest, IngestResponse
from billtracker.services.access import get_organization_ids_for_user, require_building
from billtracker.services.ingest import ingest_bills
from billtracker.services.manual_entry import build_item

logger = logging.getLogger(__name__)


def get_upload_for_user(db: Session, user: User, upload_id: uuid.UUID) -> BillUpload:
    """Get an upload whose building the user may access."""
    upload = db.query(BillUpload).filter(BillUpload.id == upload_id).first()
    if not upload:
        raise NotFound("Upload not found")
    require_building(db, user, upload.building_id)
    return upload


def get_pending_uploads_for_user(db: Session, user: User) -> list[BillUpload]:
    """Get pending uploads across the user's organizations, oldest first."""
    org_ids = get_organization_ids_for_user(db, user.id)
    if not org_ids:
        return []
    return (
        db.query(BillUpload)
        .join(Building, BillUpload.building_id == Building.id)
        .filter(
            Building.organization_id.in_(org_ids),
            BillUpload.status == UploadStatus.PENDING,
        )
        .order_by(BillUpload.created_at)
        .all()
    )


def mark_entered(db: Session, upload: BillUpload) -> BillUpload:
    """Transition an upload to entered."""
    with persistence_step(db, "Upload status update"):
        upload.status = UploadStatus.ENTERED
        upload.entered_at = datetime.now(UTC)
        db.commit()
    db.refresh(upload)
    logger.info("Bill upload %s marked entered", upload.id)
    return upload


def enter_bill_for_upload(
    db: Session,
    user: User,
    upload_id: uuid.UUID,
    entry: ManualBillEntry,
) -> IngestResponse:
    """Record a hand-typed bill for an upload and mark the upload entered.

    The entry goes through the same reconciliation as bulk ingestion, so
    re-entering an upload updates its bill in place.
    """
    upload = get_upload_for_user(db, user, upload_id)

    meter_label = entry.meter_label or (upload.meter.label if upload.meter else None)
    if not meter_label:
        raise ValidationFailed("A meter label is required for this upload")

    utility = entry.utility
    if utility is None and upload.meter is not None:
        utility = UtilityType(upload.meter.utility)
    if utility is None:
        raise ValidationFailed("A utility type is required for this upload")

    item = build_item(
        {
            "building_id": upload.building_id,
            "meter_label": meter_label,
            "utility_provider": entry.utility_provider,
            "period_start": entry.period_start,
            "period_end": entry.period_end,
            "total_cost": entry.total_cost,
            "demand_cost": entry.demand_cost,
            "usage_kwh": entry.usage_kwh,
            "usage_therms": entry.usage_therms,
            "usage_mcf": entry.usage_mcf,
            "usage_mmbtu": entry.usage_mmbtu,
        }
    )
    response = ingest_bills(
        db,
        user,
        IngestRequest(utility=utility, bill_upload_id=upload.id, items=[item]),
    )
    mark_entered(db, upload)
    return response
