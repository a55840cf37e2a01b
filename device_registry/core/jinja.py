"""Jinja2 environment with the formatting filters the templates use."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from fastapi.templating import Jinja2Templates

from .config import settings
from .warranty import (
    THAI_MONTHS,
    WarrantyInfo,
    computer_status_text,
    format_thai_date,
    parse_expiry,
    warranty_days_text,
    warranty_status_text,
)

_LOCAL_TZ = ZoneInfo(settings.TZ) if settings.TZ else None


def _to_dt(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None and _LOCAL_TZ:
        dt = dt.replace(tzinfo=_LOCAL_TZ)
    if _LOCAL_TZ:
        dt = dt.astimezone(_LOCAL_TZ)
    return dt


def _fmt_dt(value: Any, fmt: str = "%Y-%m-%d %H:%M") -> str:
    dt = _to_dt(value)
    return dt.strftime(fmt) if dt else ""


def _thai_long_date(value: Any) -> str:
    """``date`` -> ``29 ม.ค. 2026``; unparseable text is shown as typed."""

    if isinstance(value, date):
        parsed = value
    else:
        parsed = parse_expiry(value)
    if parsed is None:
        return value or "-"
    return f"{parsed.day} {THAI_MONTHS[parsed.month - 1]} {parsed.year}"


def _thai_short_date(value: Any) -> str:
    parsed = value if isinstance(value, date) else parse_expiry(value)
    return format_thai_date(parsed) if parsed else (value or "-")


def _iso_date(value: Any) -> str:
    """Expiry text -> ``YYYY-MM-DD`` for ``<input type="date">`` prefill."""

    parsed = parse_expiry(value)
    return parsed.isoformat() if parsed else ""


def _warranty_days(record: Any) -> str:
    info = WarrantyInfo(record.warranty_status, record.days_until_expiry, record.expiry_date)
    return warranty_days_text(info)


def get_templates() -> Jinja2Templates:
    """Build a ``Jinja2Templates`` with the project filters registered."""

    templates = Jinja2Templates(directory=str(settings.templates_dir))
    env = templates.env
    env.filters["fmt_dt"] = _fmt_dt
    env.filters["thai_date"] = _thai_long_date
    env.filters["thai_short_date"] = _thai_short_date
    env.filters["iso_date"] = _iso_date
    env.filters["warranty_text"] = warranty_status_text
    env.filters["status_text"] = computer_status_text
    env.filters["warranty_days"] = _warranty_days
    env.globals["app_name"] = settings.APP_NAME
    return templates
