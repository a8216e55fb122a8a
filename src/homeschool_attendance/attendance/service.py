from __future__ import annotations

import uuid
from collections import OrderedDict
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..app_logger import get_logger
from ..common.datetime_utils import now_local, parse_school_year
from ..common.validators import (
    optional_text,
    require_date_in_school_year,
    require_day_status,
    require_iso_date,
    require_non_empty,
)
from ..core.exceptions import DomainError, NotFoundError, StorageError, ValidationError
from ..database.connection import TransactionProvider
from ..students.repository import StudentRepository
from .locks import KeyedLocks
from .model import AttendanceRecord, DayEntry, DayUpdate, compute_totals
from .repository import AttendanceRepository

logger = get_logger("attendance")

RecordKey = tuple[str, str]


class AttendanceService:
    """Reads yearly attendance records and merges day statuses into them.

    ``upsert_days`` is the only write path for attendance data. Each call
    locks every (student, school year) it touches, then runs the whole batch
    in one transaction: load or start the record, merge the new days, recompute
    the rollups from the full calendar, persist.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        transactions: TransactionProvider,
        *,
        locks: Optional[KeyedLocks] = None,
    ):
        self._attendance = attendance
        self._students = students
        self._tx = transactions
        self._locks = locks or KeyedLocks()

    def get_attendance_record(
        self,
        student_id: str,
        school_year: str,
        *,
        owner_id: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        """Record of a student for a school year, or None when nothing was recorded yet."""

        parse_school_year(school_year)
        record = self._attendance.get_for_student_and_year(student_id, school_year)
        if record is not None and owner_id is not None and record.user_id != owner_id:
            return None
        return record

    def list_year_records(self, owner_id: str, school_year: str) -> Sequence[AttendanceRecord]:
        parse_school_year(school_year)
        return list(self._attendance.list_for_owner_and_year(owner_id, school_year))

    def upsert_days(self, entries: Iterable[DayUpdate], owner_id: str, school_year: str) -> None:
        owner_id = require_non_empty(owner_id, "owner_id")
        parse_school_year(school_year)
        groups = self._group(entries, school_year)
        if not groups:
            return

        with self._locks.hold(groups.keys()):
            self._check_students(groups, owner_id)
            try:
                with self._tx.transaction():
                    now = now_local()
                    for (student_id, year), days in groups.items():
                        self._merge_group(student_id, year, days, owner_id=owner_id, now=now)
            except DomainError:
                logger.exception("attendance batch for %s rolled back (%d record(s))", school_year, len(groups))
                raise
            except Exception as e:
                logger.exception("attendance batch for %s rolled back (%d record(s))", school_year, len(groups))
                raise StorageError(f"Attendance update failed: {e}") from e

        logger.debug(
            "upserted %d day(s) into %d record(s) for %s",
            sum(len(d) for d in groups.values()),
            len(groups),
            school_year,
        )

    @staticmethod
    def _group(entries: Iterable[DayUpdate], school_year: str) -> "OrderedDict[RecordKey, dict[str, DayEntry]]":
        groups: "OrderedDict[RecordKey, dict[str, DayEntry]]" = OrderedDict()
        for u in entries:
            student_id = require_non_empty(u.student_id, "student_id")
            # datetime is a date subclass; only the calendar day is stored.
            if isinstance(u.date, datetime):
                day = u.date.date()
            elif isinstance(u.date, date):
                day = u.date
            else:
                day = require_iso_date(u.date)
            day = require_date_in_school_year(day, school_year)
            entry = DayEntry(status=require_day_status(u.entry.status), notes=optional_text(u.entry.notes))
            # Later entries for the same date win.
            groups.setdefault((student_id, school_year), {})[day.isoformat()] = entry
        return groups

    def _check_students(self, groups: "OrderedDict[RecordKey, dict[str, DayEntry]]", owner_id: str) -> None:
        for student_id in {sid for sid, _ in groups}:
            student = self._students.get_by_id(student_id)
            if not student or student.user_id != owner_id:
                raise NotFoundError(f"Student {student_id} not found")

    def _merge_group(self, student_id: str, school_year: str, days: dict[str, DayEntry], *, owner_id: str, now) -> None:
        existing = self._attendance.get_for_student_and_year(student_id, school_year, lock=True)

        merged = dict(existing.attendance_data) if existing else {}
        merged.update(days)
        totals = compute_totals(merged)

        if existing is None:
            record = AttendanceRecord(
                id=str(uuid.uuid4()),
                student_id=student_id,
                school_year=school_year,
                user_id=owner_id,
                attendance_data=merged,
                total_days=totals.total_days,
                present_days=totals.present_days,
                absent_days=totals.absent_days,
                updated_at=now,
            )
            self._attendance.insert(record)
            return

        if existing.user_id != owner_id:
            raise ValidationError(f"Record {existing.id} belongs to another household")
        record = replace(
            existing,
            attendance_data=merged,
            total_days=totals.total_days,
            present_days=totals.present_days,
            absent_days=totals.absent_days,
            updated_at=now,
        )
        if not self._attendance.update(record):
            raise NotFoundError(f"Attendance record {existing.id} was removed while being updated")
