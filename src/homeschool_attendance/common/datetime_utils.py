from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_SCHOOL_YEAR_OPTIONS, ISO_DATE_FORMAT, SCHOOL_YEAR_START_MONTH
from ..core.exceptions import ValidationError

_SCHOOL_YEAR_RE = re.compile(r"^(\d{4})-(\d{4})$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, ISO_DATE_FORMAT).date()


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def today_local() -> date:
    return now_local().date()


def school_year_label(start_year: int) -> str:
    return f"{int(start_year)}-{int(start_year) + 1}"


def school_year_for(day: date) -> str:
    """Return the school year a calendar day belongs to (July starts a new year)."""
    start = day.year if day.month >= SCHOOL_YEAR_START_MONTH else day.year - 1
    return school_year_label(start)


def current_school_year(today: Optional[date] = None) -> str:
    return school_year_for(today or today_local())


def school_year_options(today: Optional[date] = None, count: int = DEFAULT_SCHOOL_YEAR_OPTIONS) -> list[str]:
    """Current school year followed by the previous ones, newest first."""
    start = parse_school_year(current_school_year(today))
    return [school_year_label(start - idx) for idx in range(max(0, int(count)))]


def parse_school_year(value: str) -> int:
    """Validate a canonical ``"<Y>-<Y+1>"`` school year and return its start year."""
    m = _SCHOOL_YEAR_RE.match((value or "").strip())
    if not m:
        raise ValidationError(f"Invalid school year {value!r}, expected YYYY-YYYY")
    start, end = int(m.group(1)), int(m.group(2))
    if end != start + 1:
        raise ValidationError(f"Invalid school year {value!r}, years must be consecutive")
    return start


def school_year_bounds(school_year: str) -> tuple[date, date]:
    start = parse_school_year(school_year)
    return date(start, SCHOOL_YEAR_START_MONTH, 1), date(start + 1, SCHOOL_YEAR_START_MONTH - 1, 30)
