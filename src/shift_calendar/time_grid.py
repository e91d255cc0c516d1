"""
Time Grid Mapping for Shift Calendar

Converts between vertical pixel offsets on the weekly grid and calendar
time, snaps times to the 30-minute grid, and provides the date/time string
helpers used at the data boundary (dates as YYYY-MM-DD, times as HH:mm).
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, List, Any, Tuple

# Operating window of the grid
START_HOUR = 8
END_HOUR = 23
SNAP_MINUTES = 30
VERTICAL_PADDING = 12  # px above and below the hour lines
HANDLE_SIZE = 8  # px height of the resize strips on a shift block
MIN_SHIFT_HOURS = 0.5

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"

_TIME_INPUT_RE = re.compile(r"^(\d{1,2}):?(\d{2})?\s*(am|pm)?$")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class GridConfig:
    """Geometry and snapping settings of the weekly time grid"""
    start_hour: int = START_HOUR
    end_hour: int = END_HOUR
    snap_minutes: int = SNAP_MINUTES
    vertical_padding: int = VERTICAL_PADDING
    handle_size: int = HANDLE_SIZE

    @property
    def total_hours(self) -> int:
        return self.end_hour - self.start_hour

    @property
    def min_duration(self) -> float:
        """Shortest allowed shift: one snap step, never below MIN_SHIFT_HOURS"""
        return max(MIN_SHIFT_HOURS, self.snap_minutes / 60)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startHour": self.start_hour,
            "endHour": self.end_hour,
            "snapMinutes": self.snap_minutes,
            "verticalPadding": self.vertical_padding,
            "handleSize": self.handle_size
        }

    @classmethod
    def from_settings(cls, data: Dict[str, Any]) -> 'GridConfig':
        config = cls(
            start_hour=int(data.get("startHour", START_HOUR)),
            end_hour=int(data.get("endHour", END_HOUR)),
            snap_minutes=int(data.get("snapMinutes", SNAP_MINUTES)),
            vertical_padding=int(data.get("verticalPadding", VERTICAL_PADDING)),
            handle_size=int(data.get("handleSize", HANDLE_SIZE))
        )
        if not 0 <= config.start_hour < config.end_hour <= 24:
            raise ValueError(f"Invalid grid hours: {config.start_hour}-{config.end_hour}")
        if config.snap_minutes <= 0 or 60 % config.snap_minutes != 0:
            raise ValueError(f"Snap interval must divide an hour, got {config.snap_minutes}")
        return config


class TimeGridMapper:
    """Pure pixel <-> hour conversion for one grid configuration"""

    def __init__(self, config: GridConfig = None):
        self.config = config or GridConfig()

    @property
    def snaps_per_hour(self) -> int:
        return 60 // self.config.snap_minutes

    def raw_hour(self, y: float, container_height: float) -> float:
        """Linear, unsnapped hour for a pixel offset"""
        cfg = self.config
        usable_height = container_height - cfg.vertical_padding * 2
        if usable_height <= 0:
            return float(cfg.start_hour)
        relative_y = y - cfg.vertical_padding
        return (relative_y / usable_height) * cfg.total_hours + cfg.start_hour

    def snap_hour(self, hour: float) -> float:
        """Snap a decimal hour to the grid and clamp it into the window"""
        parts = self.snaps_per_hour
        snapped = _round_half_up(hour * parts) / parts
        return float(max(self.config.start_hour, min(self.config.end_hour, snapped)))

    def pixel_to_hour(self, y: float, container_height: float) -> float:
        return self.snap_hour(self.raw_hour(y, container_height))

    def hour_to_pixel(self, hour: float, container_height: float) -> float:
        cfg = self.config
        usable_height = container_height - cfg.vertical_padding * 2
        return (hour - cfg.start_hour) / cfg.total_hours * usable_height + cfg.vertical_padding

    def hour_to_percent(self, hour: float) -> float:
        return (hour - self.config.start_hour) / self.config.total_hours * 100

    def clamp_range(self, start: float, end: float) -> Tuple[float, float]:
        """Clamp a start/end pair into the window, keeping the minimum duration"""
        cfg = self.config
        min_duration = cfg.min_duration
        start = max(cfg.start_hour, min(cfg.end_hour - min_duration, start))
        end = max(start + min_duration, min(cfg.end_hour, end))
        return start, end

    @staticmethod
    def hour_to_time_string(hour: float) -> str:
        return hour_to_time_string(hour)

    @staticmethod
    def snap_to_half_hour(time_str: str) -> str:
        return snap_to_half_hour(time_str)


def parse_time(time_str: str) -> Tuple[int, int]:
    """Parse 'HH:mm' into (hours, minutes); raises ValueError when malformed"""
    parts = time_str.strip().split(":")
    if len(parts) != 2 or not parts[0].isdigit() or not parts[1].isdigit():
        raise ValueError(f"Invalid time string: {time_str!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    if hours > 24 or minutes > 59:
        raise ValueError(f"Time out of range: {time_str!r}")
    return hours, minutes


def time_to_minutes(time_str: str) -> int:
    hours, minutes = parse_time(time_str)
    return hours * 60 + minutes


def time_to_hours(time_str: str) -> float:
    return time_to_minutes(time_str) / 60


def hour_to_time_string(hour: float) -> str:
    hours = int(math.floor(hour))
    mins = _round_half_up((hour - hours) * 60)
    safe_hours = min(max(hours, 0), 23)
    safe_mins = min(max(mins, 0), 59)
    return f"{safe_hours:02d}:{safe_mins:02d}"


def snap_to_half_hour(time_str: str) -> str:
    hours, mins = parse_time(time_str)
    mins = _round_half_up(mins / 30) * 30
    if mins == 60:
        mins = 0
        hours += 1
    if hours >= 24:
        # Constrained to the same day
        hours, mins = 23, 0
    return f"{hours:02d}:{mins:02d}"


def calculate_shift_hours(start_time: str, end_time: str) -> float:
    """Decimal hours between two HH:mm strings, rounded to 2 places.

    Overnight ranges are not wrapped: an end at or before the start gives a
    non-positive value, which validation rejects.
    """
    diff = time_to_minutes(end_time) - time_to_minutes(start_time)
    return round(diff / 60, 2)


def normalize_time_input(value: str) -> str:
    """Normalize free-form user input such as '9', '930' or '9:30 pm' to HH:mm"""
    clean = value.strip().lower()
    if not clean:
        return "09:00"
    if re.match(r"^\d{2}:\d{2}$", clean):
        return clean

    match = _TIME_INPUT_RE.match(clean)
    if match:
        hours = int(match.group(1))
        minutes = int(match.group(2)) if match.group(2) else 0
        ampm = match.group(3)
        if ampm == "pm" and hours < 12:
            hours += 12
        if ampm == "am" and hours == 12:
            hours = 0
        return f"{hours:02d}:{minutes:02d}"
    return "09:00"


def format_12h(time_str: str) -> str:
    """Display form of an HH:mm time, e.g. '13:30' -> '1:30 PM'"""
    if not time_str:
        return ""
    lowered = time_str.lower()
    if "am" in lowered or "pm" in lowered:
        return time_str
    hours, minutes = parse_time(time_str)
    suffix = "AM" if hours < 12 or hours == 24 else "PM"
    display_hour = hours % 12 or 12
    return f"{display_hour}:{minutes:02d} {suffix}"


def hour_label(hour: int) -> str:
    """Compact axis label: 8A, 12P, 1P ..."""
    if hour > 12:
        return f"{hour - 12}P"
    if hour == 12:
        return "12P"
    return f"{hour}A"


def parse_date(date_str: str) -> date:
    return datetime.strptime(date_str, DATE_FORMAT).date()


def format_date(date_obj: date) -> str:
    return date_obj.strftime(DATE_FORMAT)


def start_of_week(day: date) -> date:
    """Sunday on or before the given day"""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def get_week_days(day: date) -> List[date]:
    start = start_of_week(day)
    return [start + timedelta(days=i) for i in range(7)]


def week_range_label(day: date) -> str:
    days = get_week_days(day)
    first, last = days[0], days[-1]
    if first.month == last.month:
        return f"{first.strftime('%b')} {first.day} - {last.day}, {last.year}"
    return f"{first.strftime('%b')} {first.day} - {last.strftime('%b')} {last.day}, {last.year}"
