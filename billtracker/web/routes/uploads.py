"""Pending upload and manual bill entry web routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from billtracker.core.database import get_db
from billtracker.core.errors import AccessDenied, ApiError, NotFound
from billtracker.models.enums import UtilityType
from billtracker.schemas.bill import ManualBillEntry
from billtracker.services.bill_upload import (
    enter_bill_for_upload,
    get_pending_uploads_for_user,
    get_upload_for_user,
)
from billtracker.web.dependencies import (
    add_flash_message,
    get_current_user_from_session,
    sign_in_redirect,
)
from billtracker.web.template_config import templates

router = APIRouter()

ENTRY_FIELDS = (
    "period_start",
    "period_end",
    "meter_label",
    "utility",
    "utility_provider",
    "usage_kwh",
    "usage_therms",
    "usage_mcf",
    "usage_mmbtu",
    "total_cost",
    "demand_cost",
)


@router.get("/", response_class=HTMLResponse, response_model=None)
async def list_uploads(
    request: Request,
    db: Session = Depends(get_db),
) -> HTMLResponse | RedirectResponse:
    """List uploads awaiting manual entry."""
    user = get_current_user_from_session(request, db)
    if not user:
        return sign_in_redirect(request)

    uploads = get_pending_uploads_for_user(db, user)
    return templates.TemplateResponse(
        request,
        "uploads/list.html",
        {"user": user, "uploads": uploads},
    )


@router.get("/{upload_id}/enter", response_class=HTMLResponse, response_model=None)
async def enter_bill_page(
    request: Request,
    upload_id: UUID,
    db: Session = Depends(get_db),
) -> HTMLResponse | RedirectResponse:
    """Display the manual entry form for an upload."""
    user = get_current_user_from_session(request, db)
    if not user:
        return sign_in_redirect(request)

    try:
        upload = get_upload_for_user(db, user, upload_id)
    except (NotFound, AccessDenied):
        add_flash_message(request, "Upload not found or access denied.", "error")
        return RedirectResponse("/uploads", status_code=303)

    return templates.TemplateResponse(
        request,
        "uploads/enter.html",
        {
            "user": user,
            "upload": upload,
            "form": {},
            "utilities": [u.value for u in UtilityType],
        },
    )


@router.post("/{upload_id}/enter", response_class=HTMLResponse, response_model=None)
async def enter_bill_submit(
    request: Request,
    upload_id: UUID,
    db: Session = Depends(get_db),
) -> HTMLResponse | RedirectResponse:
    """Process the manual entry form."""
    user = get_current_user_from_session(request, db)
    if not user:
        return sign_in_redirect(request)

    form_data = await request.form()
    form = {key: str(form_data.get(key) or "").strip() for key in ENTRY_FIELDS}

    try:
        upload = get_upload_for_user(db, user, upload_id)
    except (NotFound, AccessDenied):
        add_flash_message(request, "Upload not found or access denied.", "error")
        return RedirectResponse("/uploads", status_code=303)

    error = None
    status_code = 400
    try:
        entry = ManualBillEntry.model_validate({k: v for k, v in form.items() if v})
        enter_bill_for_upload(db, user, upload_id, entry)
    except ValidationError as exc:
        error = exc.errors()[0]["msg"].removeprefix("Value error, ")
    except ApiError as exc:
        error = exc.message
        status_code = exc.status_code

    if error:
        return templates.TemplateResponse(
            request,
            "uploads/enter.html",
            {
                "user": user,
                "upload": upload,
                "form": form,
                "utilities": [u.value for u in UtilityType],
                "error": error,
            },
            status_code=status_code,
        )

    add_flash_message(request, f"Bill for {upload.file_name} saved.", "success")
    return RedirectResponse("/uploads", status_code=303)
