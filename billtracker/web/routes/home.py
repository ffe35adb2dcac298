"""Landing route."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from billtracker.models.user import User
from billtracker.web.dependencies import get_current_user_from_session, sign_in_redirect

router = APIRouter()


@router.get("/")
async def home(
    request: Request,
    user: User | None = Depends(get_current_user_from_session),
) -> RedirectResponse:
    """Send signed-in users to their pending uploads."""
    if not user:
        return sign_in_redirect(request)
    return RedirectResponse("/uploads", status_code=303)
