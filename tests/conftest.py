from __future__ import annotations

import threading
import time
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime
from typing import Optional

import pytest

from homeschool_attendance.attendance.model import AttendanceRecord
from homeschool_attendance.container import wire
from homeschool_attendance.core.exceptions import ConstraintViolation, StorageError
from homeschool_attendance.students.model import Student, StudentProfile

FIXED_NOW = datetime(2025, 9, 15, 9, 30, 0)


class InMemoryDatabase:
    """Shared state for the in-memory repositories.

    ``transaction()`` snapshots both tables and restores them if the block
    raises, which mirrors an InnoDB rollback closely enough for service tests.
    """

    def __init__(self):
        self.students: dict[str, Student] = {}
        self.records: dict[tuple[str, str], AttendanceRecord] = {}
        self.fail_writes_for: set[str] = set()
        self.read_delay = 0.0
        self.commits = 0
        self.rollbacks = 0
        self._local = threading.local()

    @contextmanager
    def transaction(self):
        if getattr(self._local, "depth", 0):
            self._local.depth += 1
            try:
                yield self
            finally:
                self._local.depth -= 1
            return

        snapshot = (dict(self.students), dict(self.records))
        self._local.depth = 1
        try:
            yield self
            self.commits += 1
        except BaseException:
            self.students, self.records = snapshot
            self.rollbacks += 1
            raise
        finally:
            self._local.depth = 0


class InMemoryStudents:
    def __init__(self, db: InMemoryDatabase):
        self._db = db

    def list_for_owner(self, user_id: str):
        items = [s for s in self._db.students.values() if s.user_id == user_id]
        items.sort(key=lambda s: s.name)
        return items

    def get_by_id(self, student_id: str) -> Optional[Student]:
        return self._db.students.get(student_id)

    def create(self, *, student_id: str, profile: StudentProfile, created_at: datetime) -> Student:
        student = Student(
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
        self._db.students[student_id] = student
        return student

    def update_fields(self, student_id: str, changes: dict) -> bool:
        student = self._db.students.get(student_id)
        if not student:
            return False
        self._db.students[student_id] = replace(student, **changes)
        return True

    def delete_by_id(self, student_id: str) -> bool:
        if any(sid == student_id for sid, _ in self._db.records):
            raise ConstraintViolation(f"attendance_records still reference student {student_id}")
        return self._db.students.pop(student_id, None) is not None


class InMemoryAttendance:
    def __init__(self, db: InMemoryDatabase):
        self._db = db
        self.reads = 0

    def get_for_student_and_year(
        self, student_id: str, school_year: str, *, lock: bool = False
    ) -> Optional[AttendanceRecord]:
        self.reads += 1
        record = self._db.records.get((student_id, school_year))
        if self._db.read_delay:
            time.sleep(self._db.read_delay)
        return record

    def list_for_owner_and_year(self, user_id: str, school_year: str):
        return [r for (_, year), r in self._db.records.items() if r.user_id == user_id and year == school_year]

    def _check_write(self, record: AttendanceRecord) -> None:
        if record.student_id in self._db.fail_writes_for:
            raise StorageError(f"disk full while writing {record.student_id}")
        if record.student_id not in self._db.students:
            raise ConstraintViolation(f"student {record.student_id} does not exist")

    def insert(self, record: AttendanceRecord) -> None:
        self._check_write(record)
        key = (record.student_id, record.school_year)
        if key in self._db.records:
            raise ConstraintViolation(f"duplicate record for {key}")
        self._db.records[key] = record

    def update(self, record: AttendanceRecord) -> bool:
        self._check_write(record)
        key = (record.student_id, record.school_year)
        if key not in self._db.records:
            return False
        self._db.records[key] = record
        return True

    def delete_for_student(self, student_id: str) -> int:
        keys = [k for k in self._db.records if k[0] == student_id]
        for k in keys:
            del self._db.records[k]
        return len(keys)


@pytest.fixture
def fixed_now(monkeypatch):
    monkeypatch.setattr("homeschool_attendance.attendance.service.now_local", lambda: FIXED_NOW)
    monkeypatch.setattr("homeschool_attendance.students.service.now_local", lambda: FIXED_NOW)
    return FIXED_NOW


@pytest.fixture
def db():
    return InMemoryDatabase()


@pytest.fixture
def container(db, fixed_now):
    return wire(conn=db, students_repo=InMemoryStudents(db), attendance_repo=InMemoryAttendance(db))


@pytest.fixture
def store(container):
    return container.store


@pytest.fixture
def owner():
    return "household-1"


@pytest.fixture
def make_student(store, owner):
    def _make(name: str = "Ada", *, user_id: Optional[str] = None, **extra) -> Student:
        return store.create_student(StudentProfile(name=name, dob="2015-04-02", user_id=user_id or owner, **extra))

    return _make
