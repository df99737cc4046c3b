"""Jinja2 environment for the inventory screen.

Builds the ``Jinja2Templates`` instance and registers the display filters the
templates rely on.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

from fastapi.templating import Jinja2Templates

from .config import settings

_LOCAL_TZ = ZoneInfo(settings.TZ) if settings.TZ else None


def _from_item_id(value: Any) -> datetime | None:
    """Item ids are millisecond timestamps; turn one back into a local datetime."""

    try:
        millis = int(value)
    except (TypeError, ValueError):
        return None
    try:
        dt = datetime.fromtimestamp(millis / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return dt.astimezone(_LOCAL_TZ) if _LOCAL_TZ else dt


def _fmt_added(value: Any, fmt: str = "%Y-%m-%d %I:%M %p") -> str:
    dt = _from_item_id(value)
    return dt.strftime(fmt) if dt else ""


def _fmt_currency(value: Any) -> str:
    """Dollar sign and thousands separators, two decimals."""

    try:
        number = float(value)
    except (TypeError, ValueError):
        return ""
    return f"${number:,.2f}"


def _fmt_cost_input(value: Any) -> str:
    # ``50.0`` reads oddly in a text box; drop the trailing zero fraction.
    try:
        number = float(value)
    except (TypeError, ValueError):
        return ""
    return str(int(number)) if number.is_integer() else str(number)


def get_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(settings.TEMPLATES_DIR))
    env = templates.env
    env.filters["fmt_added"] = _fmt_added
    env.filters["fmt_currency"] = _fmt_currency
    env.filters["fmt_cost_input"] = _fmt_cost_input
    return templates
