"""Jinja2 template configuration."""

from pathlib import Path

from fastapi.templating import Jinja2Templates

from billtracker.web.dependencies import get_flash_messages

# Template directory is at billtracker/templates/
BASE_DIR = Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
templates.env.globals["get_flash_messages"] = get_flash_messages
