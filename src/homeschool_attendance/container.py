from __future__ import annotations

from dataclasses import dataclass

from .attendance.locks import KeyedLocks
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection, TransactionProvider
from .reports.service import ReportService
from .store import AttendanceStore
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService


@dataclass(frozen=True)
class Container:
    conn: TransactionProvider

    students_repo: StudentRepository
    attendance_repo: AttendanceRepository

    student_service: StudentService
    attendance_service: AttendanceService
    store: AttendanceStore
    report_service: ReportService


def wire(
    *,
    conn: TransactionProvider,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
) -> Container:
    student_service = StudentService(students_repo, attendance_repo, conn)
    attendance_service = AttendanceService(attendance_repo, students_repo, conn, locks=KeyedLocks())
    store = AttendanceStore(student_service, attendance_service)

    return Container(
        conn=conn,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        student_service=student_service,
        attendance_service=attendance_service,
        store=store,
        report_service=ReportService(store),
    )


def build_container(*, db_config: dict) -> Container:
    """Open the storage handle and wire the MySQL-backed services.

    Raises StorageError when the database cannot be reached.
    """

    conn = DatabaseConnection(DBConfig.from_dict(db_config)).open()
    return wire(
        conn=conn,
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
    )


def open_store(db_config: dict) -> AttendanceStore:
    return build_container(db_config=db_config).store
