"""Date normalization for free-form user and CSV input.

Every date that enters the ledger passes through ``normalize_date``. Rules are
tried in order:

  1. ``YYYY-MM-DD`` or ``YYYY/MM/DD`` (a trailing time part is ignored)
  2. ``DD/MM/YYYY`` or ``DD-MM-YYYY`` with day 1-31, month 1-12, year 1900-2200
  3. anything ``dateutil`` can parse, truncated to the date; day-first unless
     the text starts with a 4-digit year

The canonical text form is ISO ``YYYY-MM-DD``.
"""

import re
from datetime import date, datetime, timezone

from dateutil import parser as date_parser

from src.bk_common.errors import ValidationError

MIN_YEAR = 1900
MAX_YEAR = 2200

_ISO_RE = re.compile(r"^(\d{4})([-/.])(\d{1,2})\2(\d{1,2})(?:[ T].*)?$")
_YEAR_FIRST_RE = re.compile(r"^\d{4}\b")
_DAY_FIRST_RE = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})(?:[ T].*)?$")

# Fixed default so fields missing from the input never depend on "today"
_PARSER_DEFAULT = datetime(2000, 1, 1)


def _build(year: int, month: int, day: int, raw: str) -> date:
    try:
        return date(year, month, day)
    except ValueError:
        raise ValidationError(f"Invalid date: {raw!r}") from None


def normalize_date(value: str | date | datetime) -> date:
    """Return the calendar date for ``value`` or raise ValidationError."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    raw = (value or "").strip()
    if not raw:
        raise ValidationError("Date is required")

    m = _ISO_RE.match(raw)
    if m:
        year, month, day = int(m.group(1)), int(m.group(3)), int(m.group(4))
        return _build(year, month, day, raw)

    m = _DAY_FIRST_RE.match(raw)
    if m:
        day, month, year = (int(g) for g in m.groups())
        if not (1 <= day <= 31 and 1 <= month <= 12 and MIN_YEAR <= year <= MAX_YEAR):
            raise ValidationError(f"Invalid date: {raw!r}")
        return _build(year, month, day, raw)

    year_first = bool(_YEAR_FIRST_RE.match(raw))
    try:
        parsed = date_parser.parse(
            raw, dayfirst=not year_first, yearfirst=year_first, default=_PARSER_DEFAULT
        )
    except (ValueError, OverflowError):
        raise ValidationError(f"Unrecognized date: {raw!r}") from None
    if not (MIN_YEAR <= parsed.year <= MAX_YEAR):
        raise ValidationError(f"Date out of range: {raw!r}")
    return parsed.date()


def canonical_date_text(value: str | date | datetime) -> str:
    """Normalize and render as ``YYYY-MM-DD``."""
    return normalize_date(value).isoformat()


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)
