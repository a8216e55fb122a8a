from __future__ import annotations

from datetime import date

import pytest

from homeschool_attendance.common.datetime_utils import (
    current_school_year,
    parse_school_year,
    school_year_bounds,
    school_year_for,
    school_year_options,
)
from homeschool_attendance.core.exceptions import ValidationError


@pytest.mark.parametrize(
    "day, expected",
    [
        (date(2025, 7, 1), "2025-2026"),
        (date(2025, 12, 31), "2025-2026"),
        (date(2026, 1, 1), "2025-2026"),
        (date(2026, 6, 30), "2025-2026"),
        (date(2026, 7, 1), "2026-2027"),
    ],
)
def test_school_year_starts_in_july(day, expected):
    assert school_year_for(day) == expected


def test_current_school_year_uses_given_day():
    assert current_school_year(date(2026, 3, 14)) == "2025-2026"


def test_school_year_options_newest_first():
    assert school_year_options(date(2025, 9, 1), count=3) == ["2025-2026", "2024-2025", "2023-2024"]
    assert len(school_year_options(date(2025, 9, 1))) == 12


def test_bounds():
    assert school_year_bounds("2025-2026") == (date(2025, 7, 1), date(2026, 6, 30))


@pytest.mark.parametrize("value", ["", "2025", "2025-2025", "2025-2027", "25-26", "2025/2026", None])
def test_invalid_school_years(value):
    with pytest.raises(ValidationError):
        parse_school_year(value)


def test_parse_school_year_returns_start():
    assert parse_school_year(" 2024-2025 ") == 2024
