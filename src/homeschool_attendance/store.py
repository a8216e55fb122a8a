from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .attendance.model import AttendanceRecord, DayUpdate
from .attendance.service import AttendanceService
from .students.model import Student, StudentPatch, StudentProfile
from .students.service import StudentService


class AttendanceStore:
    """Owner-scoped storage of students and their yearly attendance records.

    Single entry point used by the HTTP layer and the report service. Every
    operation raises a DomainError subclass on failure (ValidationError,
    NotFoundError, ConstraintViolation or StorageError).
    """

    def __init__(self, students: StudentService, attendance: AttendanceService):
        self._students = students
        self._attendance = attendance

    def list_students(self, owner_id: str) -> Sequence[Student]:
        return self._students.list_students(owner_id)

    def get_student(self, student_id: str, *, owner_id: Optional[str] = None) -> Student:
        return self._students.get_student(student_id, owner_id=owner_id)

    def create_student(self, profile: StudentProfile) -> Student:
        return self._students.create_student(profile)

    def update_student(self, student_id: str, patch: StudentPatch, *, owner_id: Optional[str] = None) -> None:
        self._students.update_student(student_id, patch, owner_id=owner_id)

    def delete_student(self, student_id: str, *, owner_id: Optional[str] = None) -> None:
        self._students.delete_student(student_id, owner_id=owner_id)

    def get_attendance_record(
        self,
        student_id: str,
        school_year: str,
        *,
        owner_id: Optional[str] = None,
    ) -> Optional[AttendanceRecord]:
        return self._attendance.get_attendance_record(student_id, school_year, owner_id=owner_id)

    def list_year_records(self, owner_id: str, school_year: str) -> Sequence[AttendanceRecord]:
        return self._attendance.list_year_records(owner_id, school_year)

    def upsert_days(self, entries: Iterable[DayUpdate], owner_id: str, school_year: str) -> None:
        self._attendance.upsert_days(entries, owner_id, school_year)
