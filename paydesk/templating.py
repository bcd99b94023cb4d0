from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates

from paydesk.utils.flash import pop_flashes

TEMPLATE_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


def render(request: Request, name: str, status_code: int = 200, **context):
    context.setdefault("flashes", pop_flashes(request))
    return templates.TemplateResponse(request, name, context, status_code=status_code)
