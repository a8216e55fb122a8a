from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_student_and_year(
        self, student_id: str, school_year: str, *, lock: bool = False
    ) -> Optional[AttendanceRecord]:
        """Load one record. ``lock=True`` holds the row until the surrounding transaction ends."""

        raise NotImplementedError

    def list_for_owner_and_year(self, user_id: str, school_year: str) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def insert(self, record: AttendanceRecord) -> None:
        """Persist a new record. Raises ConstraintViolation if (student, year) already exists."""

        raise NotImplementedError

    def update(self, record: AttendanceRecord) -> bool:
        """Overwrite calendar, rollups and updated_at of an existing record.

        Returns False when no record exists for (student, year).
        """

        raise NotImplementedError

    def delete_for_student(self, student_id: str) -> int:
        raise NotImplementedError
