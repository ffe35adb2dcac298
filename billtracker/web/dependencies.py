"""Web-specific dependencies for session authentication."""

import uuid
from urllib.parse import urlencode

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from billtracker.core.config import settings
from billtracker.core.database import get_db
from billtracker.models.user import User
from billtracker.services.auth import get_user


def get_current_user_from_session(
    request: Request,
    db: Session = Depends(get_db),
) -> User | None:
    """Get current user from session cookie."""
    user_id = request.session.get("user_id")
    if not user_id:
        return None
    return get_user(db, uuid.UUID(user_id))


def sign_in_redirect(request: Request) -> RedirectResponse:
    """Redirect to the sign-in page, remembering where the user was going."""
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return RedirectResponse(
        f"{settings.SIGN_IN_PATH}?{urlencode({'redirect': target})}",
        status_code=303,
    )


def safe_redirect_target(target: str | None) -> str:
    """Only allow same-site relative redirect targets."""
    if not target or not target.startswith("/") or target.startswith("//"):
        return "/uploads"
    return target


def get_flash_messages(request: Request) -> list[dict]:
    """Get and clear flash messages from session."""
    messages = request.session.pop("flash_messages", [])
    return messages


def add_flash_message(request: Request, message: str, category: str = "info") -> None:
    """Add a flash message to the session."""
    if "flash_messages" not in request.session:
        request.session["flash_messages"] = []
    request.session["flash_messages"].append({"message": message, "category": category})
