"""Example: use the store directly, without Flask.

Marks today as present for every student of a household and prints the
updated counters.
"""

import importlib
import sys

from homeschool_attendance.attendance.model import DayEntry, DayUpdate
from homeschool_attendance.common.datetime_utils import current_school_year, today_local
from homeschool_attendance.config import get_settings_module
from homeschool_attendance.container import open_store
from homeschool_attendance.core.enums import DayStatus


def main(owner_id: str) -> None:
    settings = importlib.import_module(get_settings_module())
    store = open_store(settings.DB_CONFIG)

    school_year = current_school_year()
    students = store.list_students(owner_id)
    store.upsert_days(
        [DayUpdate(student_id=s.id, date=today_local(), entry=DayEntry(DayStatus.PRESENT)) for s in students],
        owner_id,
        school_year,
    )

    for s in students:
        record = store.get_attendance_record(s.id, school_year)
        print(f"{s.name}: {record.present_days}/{record.total_days} present, {record.absent_days} absent")


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else "demo-household")
