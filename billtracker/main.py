"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from billtracker.api.routes import auth, bills, buildings, health, ingest, uploads
from billtracker.core.config import settings
from billtracker.core.database import Base, engine
from billtracker.core.errors import ApiError, api_error_handler
from billtracker.core.logging_config import setup_logging

# Import models for Base.metadata.create_all - order matters for foreign keys
from billtracker.models import (
    associations,  # noqa: F401
    bill,  # noqa: F401
    bill_upload,  # noqa: F401
    building,  # noqa: F401
    meter,  # noqa: F401
    organization,  # noqa: F401
    usage_reading,  # noqa: F401
    user,  # noqa: F401
)
from billtracker.web.routes import web_router

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    # Startup: Create database tables
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Multi-tenant utility bill tracking",
    lifespan=lifespan,
)

# Session middleware for web authentication
app.add_middleware(
    SessionMiddleware,  # type: ignore[arg-type]
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE,
    max_age=86400 * 7,  # 7 days
    same_site="lax",
    https_only=not settings.DEBUG,
)

app.add_exception_handler(ApiError, api_error_handler)  # type: ignore[arg-type]


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 with the first problem."""
    first = exc.errors()[0]
    location = ".".join(str(part) for part in first["loc"] if part != "body")
    message = first["msg"].removeprefix("Value error, ")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"ok": False, "error": f"{location}: {message}" if location else message},
    )


# Include API routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(auth.router, prefix="/api")
app.include_router(ingest.router, prefix="/api")
app.include_router(buildings.router, prefix="/api")
app.include_router(bills.router, prefix="/api")
app.include_router(uploads.router, prefix="/api")

# Include web routes (Jinja2 frontend)
app.include_router(web_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "billtracker.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
