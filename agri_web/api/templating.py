from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from agri_web.services.session import current_principal, pop_flashes

BASE_DIR = Path(__file__).resolve().parents[1]
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))


def render(request: Request, name: str, status_code: int = 200, **context):
    """Render a page with the signed-in principal and pending flash messages."""
    context.setdefault("errors", {})
    return templates.TemplateResponse(
        request,
        name,
        {
            "user": current_principal(request),
            "flashes": pop_flashes(request),
            **context,
        },
        status_code=status_code,
    )
