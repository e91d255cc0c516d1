"""
Data Models for Shift Calendar

Plain dataclasses exchanged between the calendar core, the persistence
layer and the UI. Field names are snake_case in Python and camelCase on disk.
"""

import re
from dataclasses import dataclass, replace
from typing import Dict, Any, Optional

# Placeholder id for candidates that have not been persisted yet
TEMP_SHIFT_ID = "temp-check"

DEFAULT_EMPLOYEE_COLOR = "#cccccc"

ROLES = ["Manager", "Cashier", "Stock", "Sales", "Other"]

_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def normalize_color(value: str) -> str:
    """Return a color as lowercase #rrggbb; accepts #rgb and a missing '#'"""
    match = _HEX_COLOR_RE.match(value.strip())
    if not match:
        raise ValueError(f"Not a hex color: {value!r}")
    digits = match.group(1).lower()
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits}"


@dataclass
class Employee:
    """Employee lookup record (owned by the staff directory)"""
    id: str
    name: str
    role: str = "Other"
    color: str = DEFAULT_EMPLOYEE_COLOR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "color": self.color
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Employee':
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            role=data.get("role", "Other"),
            color=data.get("color", DEFAULT_EMPLOYEE_COLOR)
        )


@dataclass
class Shift:
    """A scheduled work assignment for one employee on one date"""
    id: Optional[str]
    employee_id: str
    date: str  # YYYY-MM-DD
    start_time: str  # HH:mm
    end_time: str  # HH:mm
    hours: float = 0.0

    def with_times(self, start_time: str, end_time: str, hours: float) -> 'Shift':
        return replace(self, start_time=start_time, end_time=end_time, hours=hours)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employeeId": self.employee_id,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "hours": self.hours
        }

    def to_record(self) -> Dict[str, Any]:
        """Serialized form without the id, as sent to the store on create"""
        record = self.to_dict()
        del record["id"]
        return record

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Shift':
        return cls(
            id=data.get("id"),
            employee_id=data.get("employeeId", ""),
            date=data.get("date", ""),
            start_time=data.get("startTime", ""),
            end_time=data.get("endTime", ""),
            hours=data.get("hours", 0) or 0
        )
