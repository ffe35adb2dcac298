"""Standalone manual bill entry web routes."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from billtracker.core.database import get_db
from billtracker.core.errors import ApiError
from billtracker.models.enums import UtilityType
from billtracker.models.user import User
from billtracker.schemas.bill import NewBillEntry
from billtracker.services.manual_entry import enter_new_bill, get_entry_choices
from billtracker.web.dependencies import (
    add_flash_message,
    get_current_user_from_session,
    sign_in_redirect,
)
from billtracker.web.template_config import templates

router = APIRouter()

ENTRY_FIELDS = (
    "building_id",
    "utility",
    "meter_id",
    "period_start",
    "period_end",
    "usage_kwh",
    "usage_therms",
    "usage_mcf",
    "usage_mmbtu",
    "total_cost",
    "demand_cost",
)


def _render_form(
    request: Request,
    db: Session,
    user: User,
    form: dict,
    error: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    buildings, meters = get_entry_choices(db, user)
    return templates.TemplateResponse(
        request,
        "bills/new.html",
        {
            "user": user,
            "buildings": buildings,
            "meters": meters,
            "utilities": [u.value for u in UtilityType],
            "form": form,
            "error": error,
        },
        status_code=status_code,
    )


@router.get("/new", response_class=HTMLResponse, response_model=None)
async def new_bill_page(
    request: Request,
    db: Session = Depends(get_db),
) -> HTMLResponse | RedirectResponse:
    """Display the manual bill form."""
    user = get_current_user_from_session(request, db)
    if not user:
        return sign_in_redirect(request)

    form = {key: request.query_params.get(key, "") for key in ("building_id", "utility")}
    return _render_form(request, db, user, form)


@router.post("/new", response_class=HTMLResponse, response_model=None)
async def new_bill_submit(
    request: Request,
    db: Session = Depends(get_db),
) -> HTMLResponse | RedirectResponse:
    """Process the manual bill form."""
    user = get_current_user_from_session(request, db)
    if not user:
        return sign_in_redirect(request)

    form_data = await request.form()
    form = {key: str(form_data.get(key) or "").strip() for key in ENTRY_FIELDS}

    try:
        entry = NewBillEntry.model_validate({k: v for k, v in form.items() if v})
        enter_new_bill(db, user, entry)
    except ValidationError as exc:
        message = exc.errors()[0]["msg"].removeprefix("Value error, ")
        return _render_form(request, db, user, form, message, status_code=400)
    except ApiError as exc:
        return _render_form(request, db, user, form, exc.message, status_code=exc.status_code)

    add_flash_message(request, "Bill saved.", "success")
    # Keep building and utility selected for the next bill.
    return RedirectResponse(
        f"/bills/new?building_id={entry.building_id}&utility={entry.utility.value}",
        status_code=303,
    )
