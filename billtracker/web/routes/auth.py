"""Sign-in and sign-out web routes."""

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from billtracker.core.config import settings
from billtracker.core.database import get_db
from billtracker.models.user import User
from billtracker.services.auth import authenticate_user
from billtracker.web.dependencies import (
    add_flash_message,
    get_current_user_from_session,
    safe_redirect_target,
)
from billtracker.web.template_config import templates

router = APIRouter()


@router.get("/sign-in", response_class=HTMLResponse, response_model=None)
async def sign_in_page(
    request: Request,
    user: User | None = Depends(get_current_user_from_session),
) -> HTMLResponse | RedirectResponse:
    """Display sign-in form."""
    redirect = safe_redirect_target(request.query_params.get("redirect"))
    if user:
        return RedirectResponse(redirect, status_code=303)
    return templates.TemplateResponse(request, "auth/sign_in.html", {"redirect": redirect})


@router.post("/sign-in", response_class=HTMLResponse, response_model=None)
async def sign_in(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    redirect: str = Form("/uploads"),
    db: Session = Depends(get_db),
) -> HTMLResponse | RedirectResponse:
    """Process sign-in form."""
    user = authenticate_user(db, email, password)
    if not user:
        return templates.TemplateResponse(
            request,
            "auth/sign_in.html",
            {
                "error": "Invalid email or password",
                "redirect": safe_redirect_target(redirect),
                "email": email,
            },
            status_code=400,
        )

    request.session["user_id"] = str(user.id)
    add_flash_message(request, "Welcome back!", "success")
    return RedirectResponse(safe_redirect_target(redirect), status_code=303)


@router.get("/sign-out")
async def sign_out(request: Request) -> RedirectResponse:
    """Sign out and clear session."""
    request.session.clear()
    return RedirectResponse(settings.SIGN_IN_PATH, status_code=303)
