from __future__ import annotations

import uuid
from typing import Optional, Sequence

from ..app_logger import get_logger
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.exceptions import NotFoundError
from ..database.connection import TransactionProvider
from .model import Student, StudentPatch, StudentProfile
from .repository import StudentRepository

logger = get_logger("students")


class StudentService:
    """Use case: manage student profiles of one household."""

    def __init__(
        self,
        students: StudentRepository,
        attendance: AttendanceRepository,
        transactions: TransactionProvider,
    ):
        self._students = students
        self._attendance = attendance
        self._tx = transactions

    def list_students(self, owner_id: str) -> Sequence[Student]:
        owner_id = require_non_empty(owner_id, "owner_id")
        return list(self._students.list_for_owner(owner_id))

    def get_student(self, student_id: str, *, owner_id: Optional[str] = None) -> Student:
        """Load a student, optionally checking it belongs to ``owner_id``.

        Another household's student is reported as missing.
        """

        student = self._students.get_by_id(student_id)
        if not student or (owner_id is not None and student.user_id != owner_id):
            raise NotFoundError(f"Student {student_id} not found")
        return student

    def create_student(self, profile: StudentProfile) -> Student:
        profile = profile.normalized()
        student = self._students.create(student_id=str(uuid.uuid4()), profile=profile, created_at=now_local())
        logger.info("created student %s for owner %s", student.id, student.user_id)
        return student

    def update_student(self, student_id: str, patch: StudentPatch, *, owner_id: Optional[str] = None) -> None:
        changes = patch.changes()
        with self._tx.transaction():
            if owner_id is not None:
                self.get_student(student_id, owner_id=owner_id)
            if not self._students.update_fields(student_id, changes):
                raise NotFoundError(f"Student {student_id} not found")
        logger.debug("updated student %s (%s)", student_id, ", ".join(sorted(changes)) or "no changes")

    def delete_student(self, student_id: str, *, owner_id: Optional[str] = None) -> None:
        """Delete a student and all of its attendance records in one transaction."""

        with self._tx.transaction():
            self.get_student(student_id, owner_id=owner_id)
            removed = self._attendance.delete_for_student(student_id)
            if not self._students.delete_by_id(student_id):
                raise NotFoundError(f"Student {student_id} not found")
        logger.info("deleted student %s and %d attendance record(s)", student_id, removed)
