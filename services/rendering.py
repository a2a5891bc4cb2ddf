"""
Jinja2 environment for the HTML and text documents the service produces
(credentials emails, reset emails, carton labels, invoice print views).
"""

from datetime import datetime
from pathlib import Path
from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from services.calculations import format_cedis, format_usd
from services.helpers import format_date, get_status_label, truncate_text
from services.photos import get_first_photo_url, has_multiple_photos

TEMPLATE_DIR = Path(__file__).parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"]),
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["usd"] = format_usd
_env.filters["cedis"] = format_cedis
_env.filters["date"] = format_date
_env.filters["status_label"] = get_status_label
_env.filters["truncate_text"] = truncate_text
_env.filters["first_photo"] = get_first_photo_url
_env.tests["multiple_photos"] = has_multiple_photos
_env.globals["current_year"] = lambda: datetime.utcnow().year


def render_template(name: str, **context) -> str:
    return _env.get_template(name).render(**context)
