from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.enums import DayStatus
from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date, school_year_bounds


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def optional_text(value: Optional[str]) -> Optional[str]:
    """Normalize "no value" (None, empty or blank string) to None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def require_iso_date(value: str, field_name: str = "date") -> date:
    try:
        return parse_iso_date(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an ISO date (YYYY-MM-DD), got {value!r}")


def require_day_status(value) -> DayStatus:
    try:
        return DayStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in DayStatus)
        raise ValidationError(f"Unknown attendance status {value!r} (allowed: {allowed})")


def require_date_in_school_year(day: date, school_year: str) -> date:
    # Deliberately stricter than filing a day under any year label: it must fall within July 1 to June 30.
    first, last = school_year_bounds(school_year)
    if not first <= day <= last:
        raise ValidationError(f"{day.isoformat()} is outside school year {school_year}")
    return day
