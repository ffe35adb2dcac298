"""Bill upload routes."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from billtracker.api.dependencies import get_api_user
from billtracker.core.database import get_db
from billtracker.models.user import User
from billtracker.schemas.bill import BillUploadResponse, ManualBillEntry
from billtracker.schemas.ingest import IngestResponse
from billtracker.services import bill_upload as upload_service

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.get("/", response_model=list[BillUploadResponse])
def list_pending_uploads(
    user: User = Depends(get_api_user),
    db: Session = Depends(get_db),
) -> list[BillUploadResponse]:
    """List uploads still awaiting manual entry."""
    uploads = upload_service.get_pending_uploads_for_user(db, user)
    return [BillUploadResponse.model_validate(u) for u in uploads]


@router.post("/{upload_id}/enter", response_model=IngestResponse)
def enter_bill(
    upload_id: UUID,
    entry: ManualBillEntry,
    user: User = Depends(get_api_user),
    db: Session = Depends(get_db),
) -> IngestResponse:
    """Record the bill typed in for an upload and mark the upload entered."""
    return upload_service.enter_bill_for_upload(db, user, upload_id, entry)
