"""API dependencies for authenticating requests."""

import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from billtracker.core.database import get_db
from billtracker.core.errors import AuthenticationRequired
from billtracker.models.user import User
from billtracker.services.auth import decode_token, get_user, get_user_by_email

bearer_scheme = HTTPBearer(auto_error=False)


def get_api_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the caller from a bearer token or, failing that, the session cookie."""
    if credentials is not None:
        token_data = decode_token(credentials.credentials)
        user = get_user_by_email(db, token_data.email)
        if user and user.is_active:
            return user
        raise AuthenticationRequired("Could not validate credentials")

    user_id = request.session.get("user_id")
    if user_id:
        user = get_user(db, uuid.UUID(user_id))
        if user:
            return user
    raise AuthenticationRequired("Auth session missing!")
