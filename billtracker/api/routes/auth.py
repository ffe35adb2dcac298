"""Authentication routes for API clients."""

from datetime import timedelta

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from billtracker.api.dependencies import get_api_user
from billtracker.core.config import settings
from billtracker.core.database import get_db
from billtracker.core.errors import AuthenticationRequired
from billtracker.models.user import User
from billtracker.schemas.user import LoginRequest, Token, UserResponse
from billtracker.services.auth import authenticate_user, create_access_token

router = APIRouter(prefix="/auth", tags=["authentication"])


@router.post("/token", response_model=Token)
def issue_token(login_data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange email and password for a bearer token."""
    user = authenticate_user(db, login_data.email, login_data.password)
    if not user:
        raise AuthenticationRequired("Incorrect email or password")

    access_token = create_access_token(
        data={"sub": user.email},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=UserResponse)
def read_current_user(user: User = Depends(get_api_user)) -> UserResponse:
    """Get the authenticated user."""
    return UserResponse.model_validate(user)
