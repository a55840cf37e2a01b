"""Warranty-expiry parsing and classification.

Warranty dates are stored as free text, typed by people in whatever form
they were used to. ``parse_expiry`` recognises a closed list of formats, tried
in a fixed order, and ``classify`` turns the result into one of three bands:

* ``expired``  - the expiry day is in the past;
* ``warning``  - it falls within the next ``WARNING_WINDOW_DAYS`` days
  (today and the last day of the window included);
* ``valid``    - anything later.

Text that matches none of the formats is classified as ``expired`` with
``UNPARSEABLE_DAYS`` and no ``expiry_date``. Every caller goes through
``classify`` so that rule is applied the same way everywhere.

The Thai short form (``29-ม.ค.-69``) carries only the last two digits of the
Buddhist-era year. They are always read as 25xx, so only Gregorian years
1957-2056 can be expressed in it.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Literal, NamedTuple
from zoneinfo import ZoneInfo

from .config import settings

WarrantyStatus = Literal["valid", "warning", "expired"]

VALID: WarrantyStatus = "valid"
WARNING: WarrantyStatus = "warning"
EXPIRED: WarrantyStatus = "expired"
WARRANTY_STATUSES: tuple[WarrantyStatus, ...] = (VALID, WARNING, EXPIRED)

UNPARSEABLE_DAYS = -1

THAI_MONTHS = (
    "ม.ค.",
    "ก.พ.",
    "มี.ค.",
    "เม.ย.",
    "พ.ค.",
    "มิ.ย.",
    "ก.ค.",
    "ส.ค.",
    "ก.ย.",
    "ต.ค.",
    "พ.ย.",
    "ธ.ค.",
)
BUDDHIST_CENTURY = 2500
BUDDHIST_ERA_OFFSET = 543

# Order matters: the first format that yields a real calendar date wins.
GREGORIAN_FORMATS = ("%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y", "%Y-%m-%d")
_THAI_SHORT_RE = re.compile(r"^([0-9]{1,2})-([^-\s]+)-([0-9]{2})$")
# Only a full extended date followed by a time; basic (20260129) and week
# (2026-W05-4) forms stay unparseable on every Python version.
_ISO_TIMESTAMP_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}[T ]")

_WARRANTY_TEXT = {
    VALID: "อยู่ในประกัน",
    WARNING: "ใกล้หมดประกัน",
    EXPIRED: "หมดประกัน",
}
_COMPUTER_STATUS_TEXT = {
    "active": "ใช้งาน",
    "repair": "ซ่อม",
    "retired": "ปลดระวาง",
}


class WarrantyInfo(NamedTuple):
    status: WarrantyStatus
    days_until_expiry: int
    expiry_date: date | None


def current_date() -> date:
    """Today's date in the configured time zone."""

    return datetime.now(ZoneInfo(settings.TZ)).date()


def _parse_gregorian(text: str) -> date | None:
    # strptime would also read Thai or other non-ASCII digits.
    if not text.isascii():
        return None
    for fmt in GREGORIAN_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    # ISO timestamps such as "2026-01-29T00:00:00Z" count as their date.
    if not _ISO_TIMESTAMP_RE.match(text):
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def _parse_thai_short(text: str) -> date | None:
    match = _THAI_SHORT_RE.match(text)
    if not match:
        return None
    day, month_abbr, year_fragment = match.groups()
    if month_abbr not in THAI_MONTHS:
        return None
    month = THAI_MONTHS.index(month_abbr) + 1
    year = BUDDHIST_CENTURY + int(year_fragment) - BUDDHIST_ERA_OFFSET
    try:
        return date(year, month, int(day))
    except ValueError:
        return None


def parse_expiry(text: str | None) -> date | None:
    """Return the calendar date ``text`` denotes, or ``None`` when unparseable."""

    if not text:
        return None
    cleaned = str(text).strip()
    if not cleaned:
        return None
    return _parse_gregorian(cleaned) or _parse_thai_short(cleaned)


def status_for_days(days: int, window: int | None = None) -> WarrantyStatus:
    window = settings.WARNING_WINDOW_DAYS if window is None else window
    if days < 0:
        return EXPIRED
    if days <= window:
        return WARNING
    return VALID


def classify(expiry_text: str | None, today: date | None = None) -> WarrantyInfo:
    """Classify a warranty-expiry value relative to ``today``.

    ``today`` defaults to ``current_date()``; pass it explicitly when
    classifying a whole collection so every row uses the same day.
    """

    expiry = parse_expiry(expiry_text)
    if expiry is None:
        return WarrantyInfo(EXPIRED, UNPARSEABLE_DAYS, None)
    reference = today or current_date()
    days = (expiry - reference).days
    return WarrantyInfo(status_for_days(days), days, expiry)


def format_thai_date(value: date) -> str:
    """Write ``value`` in the Thai short form, e.g. ``29-ม.ค.-69``."""

    year_fragment = (value.year + BUDDHIST_ERA_OFFSET) % 100
    return f"{value.day}-{THAI_MONTHS[value.month - 1]}-{year_fragment:02d}"


def warranty_status_text(status: str) -> str:
    return _WARRANTY_TEXT.get(status, status)


def computer_status_text(status: str | None) -> str:
    if not status:
        return "-"
    return _COMPUTER_STATUS_TEXT.get(status, status)


def warranty_days_text(info: WarrantyInfo) -> str:
    """Suffix shown next to the warranty badge."""

    if info.expiry_date is None:
        return "(ไม่ทราบวันที่)"
    if info.status == EXPIRED:
        return f"({abs(info.days_until_expiry)} วันที่แล้ว)"
    return f"({info.days_until_expiry} วัน)"
