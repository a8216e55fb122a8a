"""JSON codec for the ``attendance_data`` column.

Stored shape::

    {"2025-09-03": {"status": "present"}, "2025-09-04": {"status": "absent", "notes": "sick"}}
"""

from __future__ import annotations

import json
import warnings
from typing import Mapping, Optional

from ..app_logger import get_logger
from ..core.enums import DayStatus
from ..core.exceptions import DeserializationWarning
from .model import DayEntry

logger = get_logger("attendance.serialization")


def encode_attendance_data(attendance_data: Mapping[str, DayEntry]) -> str:
    return json.dumps({d: attendance_data[d].to_dict() for d in sorted(attendance_data)}, ensure_ascii=False)


def decode_day_entry(value: object) -> Optional[DayEntry]:
    if not isinstance(value, dict) or not isinstance(value.get("status"), str):
        return None
    raw_status = value["status"]
    try:
        status = DayStatus(raw_status)
    except ValueError:
        # Unknown statuses are kept so the day still counts toward total_days.
        status = raw_status
    notes = value.get("notes")
    return DayEntry(status=status, notes=str(notes) if notes else None)


def _warn(record_id: str, reason: str) -> None:
    message = f"attendance_data of record {record_id} is unreadable ({reason}); treating as empty"
    logger.warning(message)
    warnings.warn(message, DeserializationWarning, stacklevel=3)


def decode_attendance_data(raw: Optional[str], *, record_id: str = "?") -> dict[str, DayEntry]:
    """Decode the stored JSON map.

    Corrupt payloads never raise: they decode to an empty map and emit a
    DeserializationWarning so callers can still use the record's counters.
    """

    if raw is None or raw == "":
        return {}
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")

    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as e:
        _warn(record_id, f"invalid JSON: {e}")
        return {}

    if not isinstance(payload, dict):
        _warn(record_id, f"expected an object, got {type(payload).__name__}")
        return {}

    out: dict[str, DayEntry] = {}
    dropped = []
    for day, value in payload.items():
        entry = decode_day_entry(value)
        if entry is None:
            dropped.append(day)
            continue
        out[day] = entry

    if dropped:
        logger.warning("record %s: dropped malformed day entries %s", record_id, ", ".join(sorted(dropped)))
    return out
