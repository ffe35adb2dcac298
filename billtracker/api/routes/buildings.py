"""Read-only building routes: meters and bills."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from billtracker.api.dependencies import get_api_user
from billtracker.core.config import settings
from billtracker.core.database import get_db
from billtracker.models.user import User
from billtracker.schemas.bill import BillResponse, MeterResponse
from billtracker.services.access import require_building
from billtracker.services.bill import get_bills_for_building
from billtracker.services.meter import get_meters_for_building

router = APIRouter(prefix="/buildings", tags=["buildings"])


@router.get("/{building_id}/meters", response_model=list[MeterResponse])
def list_meters(
    building_id: UUID,
    user: User = Depends(get_api_user),
    db: Session = Depends(get_db),
) -> list[MeterResponse]:
    """List a building's meters ordered by label."""
    require_building(db, user, building_id)
    meters = get_meters_for_building(db, building_id)
    return [MeterResponse.model_validate(m) for m in meters]


@router.get("/{building_id}/bills", response_model=list[BillResponse])
def list_bills(
    building_id: UUID,
    limit: int = Query(settings.BILLS_PAGE_DEFAULT_LIMIT, ge=1, le=500),
    user: User = Depends(get_api_user),
    db: Session = Depends(get_db),
) -> list[BillResponse]:
    """List a building's bills with usage, newest period first."""
    require_building(db, user, building_id)
    bills = get_bills_for_building(db, building_id, limit=limit)
    return [BillResponse.model_validate(b) for b in bills]
