from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import PATCHABLE_FIELDS, Student, StudentProfile
from .repository import StudentRepository

_COLUMNS = "id, name, dob, address, city, state, zip_code, school_id, user_id, created_at"


def _to_student(row: dict) -> Student:
    return Student(
        id=row["id"],
        name=row["name"],
        dob=row["dob"],
        user_id=row["user_id"],
        address=row.get("address"),
        city=row.get("city"),
        state=row.get("state"),
        zip_code=row.get("zip_code"),
        school_id=row.get("school_id"),
        created_at=row.get("created_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_owner(self, user_id: str) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students
                WHERE user_id=%s
                ORDER BY name ASC, created_at ASC
                """,
                (user_id,),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def get_by_id(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE id=%s", (student_id,))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def create(self, *, student_id: str, profile: StudentProfile, created_at: datetime) -> Student:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(id, name, dob, address, city, state, zip_code, school_id, user_id, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    student_id,
                    profile.name,
                    profile.dob,
                    profile.address,
                    profile.city,
                    profile.state,
                    profile.zip_code,
                    profile.school_id,
                    profile.user_id,
                    created_at,
                ),
            )
        return Student(
            id=student_id,
            name=profile.name,
            dob=profile.dob,
            user_id=profile.user_id,
            address=profile.address,
            city=profile.city,
            state=profile.state,
            zip_code=profile.zip_code,
            school_id=profile.school_id,
            created_at=created_at,
        )

    def update_fields(self, student_id: str, changes: dict[str, Optional[str]]) -> bool:
        # Column names come from the fixed whitelist, never from caller keys.
        columns = [c for c in PATCHABLE_FIELDS if c in changes]

        with db_cursor(self._conn_factory) as (_, cur):
            # MySQL reports changed rows, not matched rows, so check existence first.
            cur.execute("SELECT id FROM students WHERE id=%s FOR UPDATE", (student_id,))
            if not fetchone(cur):
                return False
            if columns:
                set_clause = ", ".join(f"{c}=%s" for c in columns)
                cur.execute(
                    f"UPDATE students SET {set_clause} WHERE id=%s",
                    tuple(changes[c] for c in columns) + (student_id,),
                )
            return True

    def delete_by_id(self, student_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE id=%s", (student_id,))
            return cur.rowcount > 0
