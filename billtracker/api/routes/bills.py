"""Standalone manual bill entry route."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from billtracker.api.dependencies import get_api_user
from billtracker.core.database import get_db
from billtracker.models.user import User
from billtracker.schemas.bill import NewBillEntry
from billtracker.schemas.ingest import IngestResponse
from billtracker.services.manual_entry import enter_new_bill

router = APIRouter(prefix="/bills", tags=["bills"])


@router.post("/", response_model=IngestResponse)
def create_manual_bill(
    entry: NewBillEntry,
    user: User = Depends(get_api_user),
    db: Session = Depends(get_db),
) -> IngestResponse:
    """Record a hand-typed bill for one of a building's meters."""
    return enter_new_bill(db, user, entry)
