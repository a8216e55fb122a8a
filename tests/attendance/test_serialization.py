from __future__ import annotations

import json

import pytest

from homeschool_attendance.attendance.model import DayEntry, compute_totals
from homeschool_attendance.attendance.serialization import decode_attendance_data, encode_attendance_data
from homeschool_attendance.core.enums import DayStatus
from homeschool_attendance.core.exceptions import DeserializationWarning


def test_encode_omits_empty_notes_and_sorts_dates():
    data = {
        "2025-09-04": DayEntry(DayStatus.ABSENT, "dentist"),
        "2025-09-03": DayEntry(DayStatus.PRESENT),
    }

    raw = encode_attendance_data(data)

    assert list(json.loads(raw)) == ["2025-09-03", "2025-09-04"]
    assert json.loads(raw)["2025-09-03"] == {"status": "present"}
    assert json.loads(raw)["2025-09-04"] == {"status": "absent", "notes": "dentist"}
    assert decode_attendance_data(raw) == data


@pytest.mark.parametrize("raw", ["{not json", "[1, 2, 3]", '"present"'])
def test_corrupt_payload_decodes_to_empty_map_with_warning(raw):
    with pytest.warns(DeserializationWarning):
        assert decode_attendance_data(raw, record_id="rec-1") == {}


def test_missing_payload_is_empty_without_warning(recwarn):
    assert decode_attendance_data(None) == {}
    assert decode_attendance_data("") == {}
    assert len(recwarn) == 0


def test_malformed_entries_are_dropped():
    raw = json.dumps({"2025-09-03": {"status": "present"}, "2025-09-04": "absent", "2025-09-05": {}})
    assert list(decode_attendance_data(raw)) == ["2025-09-03"]


def test_unknown_status_is_kept_and_counts_only_toward_total():
    raw = json.dumps({"2025-09-03": {"status": "present"}, "2025-09-04": {"status": "half_day"}})

    data = decode_attendance_data(raw)
    totals = compute_totals(data)

    assert data["2025-09-04"].status == "half_day"
    assert (totals.total_days, totals.present_days, totals.absent_days) == (2, 1, 0)
    assert json.loads(encode_attendance_data(data))["2025-09-04"] == {"status": "half_day"}
