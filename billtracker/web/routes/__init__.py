"""Web routes package."""

from fastapi import APIRouter

from billtracker.web.routes import auth, bills, home, uploads

web_router = APIRouter()

web_router.include_router(home.router, tags=["web-home"])
web_router.include_router(auth.router, prefix="/auth", tags=["web-auth"])
web_router.include_router(uploads.router, prefix="/uploads", tags=["web-uploads"])
web_router.include_router(bills.router, prefix="/bills", tags=["web-bills"])
