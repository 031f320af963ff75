"""
HTML rendering with Jinja2.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi.templating import Jinja2Templates
from starlette.requests import Request
from starlette.responses import HTMLResponse

from contactbook.shared.csrf import get_csrf_token
from contactbook.shared.flash import pop_flash

UI_DIR = Path(__file__).resolve().parent.parent / "ui"
TEMPLATES_DIR = UI_DIR / "templates"
STATIC_DIR = UI_DIR / "static"


def human_date(value: datetime | None) -> str:
    """Format a timestamp as e.g. "07 Mar 2024 at 15:04" (UTC)."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%d %b %Y at %H:%M")


def create_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters["human_date"] = human_date
    return templates


def new_template_data(request: Request) -> dict[str, Any]:
    """Data every page gets: the flash message, CSRF token and year."""
    return {
        "current_year": datetime.now(timezone.utc).year,
        "flash": pop_flash(request),
        "csrf_token": get_csrf_token(request),
    }


def render(
    request: Request,
    template_name: str,
    status_code: int = 200,
    **data: Any,
) -> HTMLResponse:
    """Render ``template_name`` with the common template data plus ``data``."""
    templates: Jinja2Templates = request.app.state.context.templates
    context = new_template_data(request)
    context.update(data)
    return templates.TemplateResponse(
        request,
        template_name,
        context,
        status_code=status_code,
    )
