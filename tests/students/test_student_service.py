from __future__ import annotations

from datetime import date

import pytest

from homeschool_attendance.attendance.model import DayEntry, DayUpdate
from homeschool_attendance.core.enums import DayStatus
from homeschool_attendance.core.exceptions import NotFoundError, StorageError, ValidationError
from homeschool_attendance.students.model import UNSET, StudentPatch, StudentProfile


def test_create_student_normalizes_missing_optionals_to_none(store, owner, fixed_now):
    student = store.create_student(
        StudentProfile(name="  Ada  ", dob="2015-04-02", user_id=owner, city="", state="   ", zip_code="12345")
    )

    assert student.name == "Ada"
    assert student.address is None
    assert student.city is None
    assert student.state is None
    assert student.school_id is None
    assert student.zip_code == "12345"
    assert student.created_at == fixed_now
    assert len(student.id) == 36
    assert store.get_student(student.id) == student


def test_create_student_requires_name_and_dob(store, owner):
    with pytest.raises(ValidationError):
        store.create_student(StudentProfile(name=" ", dob="2015-04-02", user_id=owner))
    with pytest.raises(ValidationError):
        store.create_student(StudentProfile(name="Ada", dob="", user_id=owner))


def test_ids_are_unique(make_student):
    assert make_student("Ada").id != make_student("Ada").id


def test_list_students_is_scoped_and_sorted_by_name(store, make_student, owner):
    make_student("Cleo")
    make_student("Ada")
    make_student("Ben")
    make_student("Zed", user_id="household-2")

    assert [s.name for s in store.list_students(owner)] == ["Ada", "Ben", "Cleo"]
    assert [s.name for s in store.list_students("household-2")] == ["Zed"]
    assert store.list_students("household-3") == []


def test_update_changes_only_supplied_fields(store, make_student):
    student = make_student("Ada", city="Springfield", state="IL")

    store.update_student(student.id, StudentPatch(city="Shelbyville", school_id=None))

    updated = store.get_student(student.id)
    assert updated.city == "Shelbyville"
    assert updated.state == "IL"
    assert updated.name == "Ada"
    assert updated.school_id is None


def test_update_can_clear_optional_fields(store, make_student):
    student = make_student("Ada", address="1 Main St")
    store.update_student(student.id, StudentPatch(address=""))
    assert store.get_student(student.id).address is None


def test_update_missing_student_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.update_student("does-not-exist", StudentPatch(name="Ada"))


def test_update_other_households_student_raises_not_found(store, make_student):
    student = make_student(user_id="household-2")
    with pytest.raises(NotFoundError):
        store.update_student(student.id, StudentPatch(name="Mallory"), owner_id="household-1")
    assert store.get_student(student.id).name == "Ada"


def test_patch_rejects_unknown_and_immutable_fields():
    with pytest.raises(ValidationError):
        StudentPatch.from_mapping({"user_id": "someone-else"})
    with pytest.raises(ValidationError):
        StudentPatch.from_mapping({"name": "Ada", "grade": 4})


def test_patch_rejects_clearing_required_fields():
    with pytest.raises(ValidationError):
        StudentPatch(name=None).changes()


def test_patch_changes_skip_unset_fields():
    patch = StudentPatch.from_mapping({"dob": "2014-01-01", "city": None})
    assert patch.changes() == {"dob": "2014-01-01", "city": None}
    assert patch.name is UNSET


def test_delete_student_cascades_to_attendance(store, db, make_student, owner):
    ada = make_student("Ada")
    ben = make_student("Ben")
    for year, d in (("2024-2025", date(2024, 9, 3)), ("2025-2026", date(2025, 9, 3))):
        store.upsert_days(
            [
                DayUpdate(ada.id, d, DayEntry(DayStatus.PRESENT)),
                DayUpdate(ben.id, d, DayEntry(DayStatus.ABSENT)),
            ],
            owner,
            year,
        )

    store.delete_student(ada.id)

    assert not any(sid == ada.id for sid, _ in db.records)
    assert len([k for k in db.records if k[0] == ben.id]) == 2
    with pytest.raises(NotFoundError):
        store.get_student(ada.id)


def test_delete_is_atomic(store, db, container, make_student, owner, monkeypatch):
    student = make_student()
    store.upsert_days([DayUpdate(student.id, date(2025, 9, 3), DayEntry(DayStatus.PRESENT))], owner, "2025-2026")

    def broken_delete(student_id):
        raise StorageError("lost connection")

    monkeypatch.setattr(container.students_repo, "delete_by_id", broken_delete)

    with pytest.raises(StorageError):
        store.delete_student(student.id)

    assert store.get_student(student.id) == student
    assert store.get_attendance_record(student.id, "2025-2026") is not None


def test_delete_missing_student_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.delete_student("nope")
