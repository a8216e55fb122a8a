from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Student, StudentProfile


class StudentRepository(Protocol):
    """Repository interface for Student.

    Services depend on this interface, not on a concrete database.
    """

    def list_for_owner(self, user_id: str) -> Sequence[Student]:
        """Students of one household ordered by name."""

        raise NotImplementedError

    def get_by_id(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError

    def create(self, *, student_id: str, profile: StudentProfile, created_at: datetime) -> Student:
        raise NotImplementedError

    def update_fields(self, student_id: str, changes: dict[str, Optional[str]]) -> bool:
        """Apply already-validated column changes. Returns False when no row matched."""

        raise NotImplementedError

    def delete_by_id(self, student_id: str) -> bool:
        raise NotImplementedError
