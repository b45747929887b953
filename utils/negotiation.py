"""Content negotiation between server-rendered pages and JSON.

The decision is made from the ``Accept`` header alone. JSON is returned only
when ``application/json`` is listed with a strictly higher quality than
``text/html``. A missing header, ``*/*`` and ordinary browser headers all get
HTML, so HTML is the documented default.
"""
from pathlib import Path
from typing import Optional
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def parse_accept(header: Optional[str]) -> dict:
    """Map each media type in an Accept header to its quality value"""
    qualities = {}
    if not header:
        return qualities
    for part in header.split(","):
        pieces = [p.strip() for p in part.split(";")]
        media_type = pieces[0].lower()
        if not media_type:
            continue
        quality = 1.0
        for param in pieces[1:]:
            if param.startswith("q="):
                try:
                    quality = float(param[2:])
                except ValueError:
                    quality = 0.0
        qualities[media_type] = max(quality, qualities.get(media_type, 0.0))
    return qualities


def wants_json(request: Request) -> bool:
    qualities = parse_accept(request.headers.get("accept"))
    json_q = qualities.get("application/json", 0.0)
    html_q = qualities.get("text/html", 0.0)
    return json_q > 0 and json_q > html_q


def respond(request: Request, template_name: str, data: dict, status_code: int = 200):
    """Render `template_name` with `data`, or return `data` as JSON"""
    if wants_json(request):
        return JSONResponse(jsonable_encoder(data), status_code=status_code)
    context = dict(data)
    context.setdefault("current_user", getattr(request.state, "user", None))
    return templates.TemplateResponse(request, template_name, context, status_code=status_code)


def redirect_or_json(request: Request, url: str, data: dict, status_code: int = 200):
    """Browsers follow a redirect after a form post, API clients get `data`"""
    if wants_json(request):
        return JSONResponse(jsonable_encoder(data), status_code=status_code)
    return RedirectResponse(url, status_code=302)


def error_response(request: Request, status_code: int, message: str,
                   template_name: str = "error.html", **context):
    data = {"success": False, "message": message, "error": message}
    data.update(context)
    return respond(request, template_name, data, status_code=status_code)
