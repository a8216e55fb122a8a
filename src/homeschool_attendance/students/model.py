from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from typing import Any, Optional

from ..common.validators import optional_text, require_non_empty
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Student:
    """Domain entity: a homeschooled student owned by one household (user_id)."""

    id: str
    name: str
    dob: str
    user_id: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    school_id: Optional[str] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "dob": self.dob,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "zip_code": self.zip_code,
            "school_id": self.school_id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class StudentProfile:
    """Input for creating a student; optional fields are normalized to None."""

    name: str
    dob: str
    user_id: str
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    school_id: Optional[str] = None

    def normalized(self) -> "StudentProfile":
        return StudentProfile(
            name=require_non_empty(self.name, "name"),
            dob=require_non_empty(self.dob, "dob"),
            user_id=require_non_empty(self.user_id, "user_id"),
            address=optional_text(self.address),
            city=optional_text(self.city),
            state=optional_text(self.state),
            zip_code=optional_text(self.zip_code),
            school_id=optional_text(self.school_id),
        )


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

# Columns a profile edit may touch, in write order. id, user_id and created_at are immutable.
PATCHABLE_FIELDS = ("name", "dob", "address", "city", "state", "zip_code", "school_id")
_REQUIRED_FIELDS = frozenset({"name", "dob"})


@dataclass(frozen=True)
class StudentPatch:
    """Partial profile edit. Fields left as UNSET keep their stored value;
    optional fields set to None (or blank) are cleared."""

    name: Any = field(default=UNSET)
    dob: Any = field(default=UNSET)
    address: Any = field(default=UNSET)
    city: Any = field(default=UNSET)
    state: Any = field(default=UNSET)
    zip_code: Any = field(default=UNSET)
    school_id: Any = field(default=UNSET)

    @classmethod
    def from_mapping(cls, data: dict) -> "StudentPatch":
        unknown = sorted(set(data) - set(PATCHABLE_FIELDS))
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(unknown)}")
        return cls(**data)

    def changes(self) -> dict[str, Optional[str]]:
        """Validated column -> value mapping of the supplied fields only."""
        out: dict[str, Optional[str]] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is UNSET:
                continue
            if f.name in _REQUIRED_FIELDS:
                out[f.name] = require_non_empty(value, f.name)
            else:
                out[f.name] = optional_text(value)
        return out
