from __future__ import annotations

from enum import Enum


class DayStatus(str, Enum):
    """Attendance status recorded for a single school day."""

    PRESENT = "present"
    ABSENT = "absent"
    FIELD_TRIP = "field_trip"
    HOMESCHOOL_GROUP = "homeschool_group"

    @property
    def counts_as_present(self) -> bool:
        return self in PRESENT_STATUSES

    @property
    def counts_as_absent(self) -> bool:
        return self is DayStatus.ABSENT


# Field trips and co-op days are school days the student attended.
PRESENT_STATUSES = frozenset({DayStatus.PRESENT, DayStatus.FIELD_TRIP, DayStatus.HOMESCHOOL_GROUP})

MIXED_STATUS = "mixed"
