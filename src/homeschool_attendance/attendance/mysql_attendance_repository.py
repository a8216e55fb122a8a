from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .serialization import decode_attendance_data, encode_attendance_data

_COLUMNS = (
    "id, student_id, school_year, attendance_data, total_days, present_days, absent_days, updated_at, user_id"
)


def _to_record(row: dict) -> AttendanceRecord:
    return AttendanceRecord(
        id=row["id"],
        student_id=row["student_id"],
        school_year=row["school_year"],
        user_id=row["user_id"],
        attendance_data=decode_attendance_data(row.get("attendance_data"), record_id=row["id"]),
        total_days=int(row.get("total_days") or 0),
        present_days=int(row.get("present_days") or 0),
        absent_days=int(row.get("absent_days") or 0),
        updated_at=row.get("updated_at"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_and_year(
        self, student_id: str, school_year: str, *, lock: bool = False
    ) -> Optional[AttendanceRecord]:
        lock_clause = "FOR UPDATE" if lock else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE student_id=%s AND school_year=%s
                {lock_clause}
                """,
                (student_id, school_year),
            )
            row = fetchone(cur)
            return _to_record(row) if row else None

    def list_for_owner_and_year(self, user_id: str, school_year: str) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE user_id=%s AND school_year=%s
                ORDER BY student_id
                """,
                (user_id, school_year),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def insert(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records
                    (id, student_id, school_year, attendance_data, total_days, present_days, absent_days,
                     updated_at, user_id)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.id,
                    record.student_id,
                    record.school_year,
                    encode_attendance_data(record.attendance_data),
                    record.total_days,
                    record.present_days,
                    record.absent_days,
                    record.updated_at,
                    record.user_id,
                ),
            )

    def update(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # rowcount is 0 for an unchanged row, so check the row exists first.
            cur.execute(
                "SELECT id FROM attendance_records WHERE student_id=%s AND school_year=%s FOR UPDATE",
                (record.student_id, record.school_year),
            )
            if not fetchone(cur):
                return False
            cur.execute(
                """
                UPDATE attendance_records
                SET attendance_data=%s, total_days=%s, present_days=%s, absent_days=%s, updated_at=%s
                WHERE student_id=%s AND school_year=%s
                """,
                (
                    encode_attendance_data(record.attendance_data),
                    record.total_days,
                    record.present_days,
                    record.absent_days,
                    record.updated_at,
                    record.student_id,
                    record.school_year,
                ),
            )
            return True

    def delete_for_student(self, student_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE student_id=%s", (student_id,))
            return int(cur.rowcount)
