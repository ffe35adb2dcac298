"""Password hashing, bearer tokens and user lookup."""

import uuid
from datetime import UTC, datetime, timedelta

import bcrypt
import jwt
from sqlalchemy.orm import Session

from billtracker.core.config import settings
from billtracker.core.errors import AuthenticationRequired
from billtracker.models.user import User
from billtracker.schemas.user import TokenData


def get_password_hash(password: str) -> str:
    """Hash a password with a fresh bcrypt salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        return False


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create a signed bearer token carrying ``data`` plus an expiry."""
    to_encode = data.copy()
    expire = datetime.now(UTC) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode["exp"] = expire
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> TokenData:
    """Decode a bearer token, raising AuthenticationRequired when invalid."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.InvalidTokenError as exc:
        raise AuthenticationRequired("Could not validate credentials") from exc

    email = payload.get("sub")
    if not email:
        raise AuthenticationRequired("Could not validate credentials")
    return TokenData(email=email)


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email address."""
    return db.query(User).filter(User.email == email.strip().lower()).first()


def get_user(db: Session, user_id: uuid.UUID) -> User | None:
    """Get an active user by ID."""
    return db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Return the user when the email/password pair is valid."""
    user = get_user_by_email(db, email)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user


def create_user(
    db: Session,
    email: str,
    password: str,
    full_name: str | None = None,
) -> User:
    """Create a user with a hashed password."""
    user = User(
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        full_name=full_name,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user
