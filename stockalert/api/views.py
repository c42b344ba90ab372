"""Jinja2 rendering for the HTML pages."""
from __future__ import annotations

from pathlib import Path
from urllib.parse import urlencode

from fastapi.responses import HTMLResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def url_with(path: str, params: dict[str, str] | None = None) -> str:
    query = urlencode({k: v for k, v in (params or {}).items() if v not in (None, "")})
    return f"{path}?{query}" if query else path


jinja = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
)
jinja.globals["url_with"] = url_with


def render(template_name: str, status_code: int = 200, **context) -> HTMLResponse:
    html = jinja.get_template(template_name).render(**context)
    return HTMLResponse(html, status_code=status_code)
