from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import parse_iso_date, parse_school_year
from ..core.enums import MIXED_STATUS
from ..core.exceptions import ValidationError
from ..store import AttendanceStore
from ..students.model import Student


@dataclass(frozen=True)
class MonthSummary:
    month: str  # YYYY-MM
    label: str  # e.g. "Sep 2025"
    present: int
    absent: int
    total: int

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "label": self.label,
            "present": self.present,
            "absent": self.absent,
            "total": self.total,
        }


@dataclass(frozen=True)
class YearReport:
    student: Student
    school_year: str
    months: list[MonthSummary]
    present: int
    absent: int
    total: int

    def to_dict(self) -> dict:
        return {
            "student": self.student.to_dict(),
            "school_year": self.school_year,
            "months": [m.to_dict() for m in self.months],
            "present": self.present,
            "absent": self.absent,
            "total": self.total,
        }


@dataclass(frozen=True)
class StudentYearSummary:
    student: Student
    total_days: int = 0
    present_days: int = 0
    absent_days: int = 0
    last_updated: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "student": self.student.to_dict(),
            "total_days": self.total_days,
            "present_days": self.present_days,
            "absent_days": self.absent_days,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }


@dataclass(frozen=True)
class YearOverview:
    school_year: str
    students: list[StudentYearSummary]
    # date -> status value, or "mixed" when students differ on that date
    calendar: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "school_year": self.school_year,
            "students": [s.to_dict() for s in self.students],
            "calendar": dict(sorted(self.calendar.items())),
        }


def summarize_by_month(record: Optional[AttendanceRecord]) -> list[MonthSummary]:
    """Group a record's calendar by month, oldest month first."""

    buckets: dict[str, dict[str, int]] = {}
    if record is None:
        return []

    for day, entry in record.sorted_days():
        try:
            d = parse_iso_date(day)
        except ValueError:
            continue
        b = buckets.setdefault(d.strftime("%Y-%m"), {"present": 0, "absent": 0, "total": 0})
        if entry.counts_as_present:
            b["present"] += 1
        if entry.counts_as_absent:
            b["absent"] += 1
        b["total"] += 1

    out = []
    for month in sorted(buckets):
        b = buckets[month]
        label = datetime.strptime(month, "%Y-%m").strftime("%b %Y")
        out.append(MonthSummary(month=month, label=label, present=b["present"], absent=b["absent"], total=b["total"]))
    return out


class ReportService:
    """Read-only projections of stored attendance for display and export."""

    def __init__(self, store: AttendanceStore):
        self._store = store

    def year_report(self, *, owner_id: str, student_id: str, school_year: str) -> YearReport:
        student = self._store.get_student(student_id, owner_id=owner_id)
        record = self._store.get_attendance_record(student_id, school_year, owner_id=owner_id)
        months = summarize_by_month(record)
        return YearReport(
            student=student,
            school_year=school_year,
            months=months,
            present=sum(m.present for m in months),
            absent=sum(m.absent for m in months),
            total=sum(m.total for m in months),
        )

    def year_report_csv(self, *, owner_id: str, student_id: str, school_year: str) -> str:
        report = self.year_report(owner_id=owner_id, student_id=student_id, school_year=school_year)

        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(["Student", report.student.name])
        writer.writerow(["School Year", report.school_year])
        writer.writerow([])
        writer.writerow(["Month", "Present", "Absent", "Total"])
        for m in report.months:
            writer.writerow([m.label, m.present, m.absent, m.total])
        writer.writerow(["Total", report.present, report.absent, report.total])
        return buf.getvalue()

    def year_overview(self, *, owner_id: str, school_year: str, month: Optional[int] = None) -> YearOverview:
        """Household view of a school year.

        Per-student numbers come from the cached rollups; the calendar merges
        every student's statuses, limited to ``month`` (1-12) when given.
        """

        parse_school_year(school_year)
        if month is not None and not 1 <= int(month) <= 12:
            raise ValidationError(f"Invalid month {month!r}")

        students = self._store.list_students(owner_id)
        records = {r.student_id: r for r in self._store.list_year_records(owner_id, school_year)}

        summaries: list[StudentYearSummary] = []
        calendar: dict[str, str] = {}
        for student in students:
            record = records.get(student.id)
            if record is None:
                summaries.append(StudentYearSummary(student=student))
                continue

            summaries.append(
                StudentYearSummary(
                    student=student,
                    total_days=record.total_days,
                    present_days=record.present_days,
                    absent_days=record.absent_days,
                    last_updated=record.updated_at,
                )
            )
            for day, entry in record.sorted_days():
                if month is not None and day[5:7] != f"{int(month):02d}":
                    continue
                status = entry.status_value
                existing = calendar.get(day)
                if existing is None:
                    calendar[day] = status
                elif existing != status:
                    calendar[day] = MIXED_STATUS

        return YearOverview(school_year=school_year, students=summaries, calendar=calendar)
