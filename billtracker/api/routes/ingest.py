"""Bulk bill ingestion route."""

from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from billtracker.api.dependencies import get_api_user
from billtracker.core.database import get_db
from billtracker.models.user import User
from billtracker.schemas.ingest import IngestResponse
from billtracker.services import ingest as ingest_service

router = APIRouter(tags=["ingest"])


@router.post("/ingest-bills", response_model=IngestResponse)
def ingest_bills(
    payload: Any = Body(...),
    user: User = Depends(get_api_user),
    db: Session = Depends(get_db),
) -> IngestResponse:
    """Reconcile a batch of parsed bill items against meters and bills.

    Body: ``{"utility": "electric" | "gas", "billUploadId"?: str, "items": [...]}``.
    The batch is validated as a whole before any write; items are then
    committed one by one in order.
    """
    request = ingest_service.parse_ingest_request(payload)
    return ingest_service.ingest_bills(db, user, request)
