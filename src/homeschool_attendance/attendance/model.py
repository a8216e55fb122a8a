from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Mapping, Optional, Union

from ..core.enums import DayStatus


@dataclass(frozen=True)
class DayEntry:
    """Status of one school day.

    ``status`` is a DayStatus for everything written through the store; a raw
    string only appears when legacy stored data carries an unknown status.
    """

    status: Union[DayStatus, str]
    notes: Optional[str] = None

    @property
    def counts_as_present(self) -> bool:
        return isinstance(self.status, DayStatus) and self.status.counts_as_present

    @property
    def counts_as_absent(self) -> bool:
        return isinstance(self.status, DayStatus) and self.status.counts_as_absent

    @property
    def status_value(self) -> str:
        return self.status.value if isinstance(self.status, DayStatus) else str(self.status)

    def to_dict(self) -> dict:
        out = {"status": self.status_value}
        if self.notes:
            out["notes"] = self.notes
        return out


@dataclass(frozen=True)
class DayUpdate:
    """One incoming ``date -> entry`` assignment for a student."""

    student_id: str
    date: date
    entry: DayEntry


@dataclass(frozen=True)
class AttendanceTotals:
    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0


def compute_totals(attendance_data: Mapping[str, DayEntry]) -> AttendanceTotals:
    """Rollups from the complete calendar map (never from deltas)."""
    present = sum(1 for e in attendance_data.values() if e.counts_as_present)
    absent = sum(1 for e in attendance_data.values() if e.counts_as_absent)
    return AttendanceTotals(total_days=len(attendance_data), present_days=present, absent_days=absent)


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's calendar for one school year plus cached rollups."""

    id: str
    student_id: str
    school_year: str
    user_id: str
    attendance_data: dict[str, DayEntry] = field(default_factory=dict)
    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    updated_at: Optional[datetime] = None

    @property
    def totals(self) -> AttendanceTotals:
        return AttendanceTotals(self.total_days, self.present_days, self.absent_days)

    def sorted_days(self) -> list[tuple[str, DayEntry]]:
        return sorted(self.attendance_data.items())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "school_year": self.school_year,
            "attendance_data": {d: e.to_dict() for d, e in self.sorted_days()},
            "total_days": self.total_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "user_id": self.user_id,
        }
