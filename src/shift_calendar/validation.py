"""
Commit-time validation of shifts.

Every create, update and single-shift paste goes through validate_shift()
before anything is written. Violations raise a SchedulingError subclass whose
message is suitable for showing to the user as-is.
"""

from dataclasses import replace
from typing import Iterable

from .conflicts import find_conflicts
from .data_models import Shift
from .time_grid import GridConfig, calculate_shift_hours, format_date, parse_date, time_to_minutes


class ConstraintViolation:
    """User-facing messages for rejected shifts"""
    EMPTY_EMPLOYEE = "Please select a staff member."
    EMPTY_DATE = "Please select a date."
    EMPTY_TIMES = "Please choose a start and end time."
    INVALID_DATE = "Please enter the date as YYYY-MM-DD."
    INVALID_RANGE = "End time must be after start time."
    BELOW_MINIMUM = "Shifts must be at least 30 minutes long."
    OUTSIDE_WINDOW = "Shifts must fall between {start} and {end}."
    OFF_GRID = "Shift times must be on a {minutes}-minute boundary."
    CONFLICT = "Schedule Conflict: This employee is already assigned to a shift during this time."
    PASTE_CONFLICT = "Conflict: This employee already has a shift at this time on {date}"
    NOTHING_COPIED = "Nothing has been copied yet."
    EMPTY_WEEK = "No shifts found in the source week to copy."


class SchedulingError(Exception):
    """Base exception for rejected scheduling operations"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidTimeRange(SchedulingError):
    """Raised when the end time is not after the start time"""
    pass


class BelowMinimumDuration(SchedulingError):
    """Raised when a shift is shorter than the minimum duration"""
    pass


class SchedulingConflict(SchedulingError):
    """Raised when a shift overlaps another shift of the same employee"""

    def __init__(self, message: str, conflicts=None):
        super().__init__(message)
        self.conflicts = conflicts or []


class EmptySelection(SchedulingError):
    """Raised when a required field or selection is missing"""
    pass


def _window_label(hour: int) -> str:
    return f"{hour:02d}:00"


def _minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_shift(shift: Shift) -> Shift:
    """Copy of the shift with a zero-padded YYYY-MM-DD date and HH:mm times.

    Conflict checks and day layout compare these strings directly, so every
    stored shift must use the canonical form.
    """
    try:
        day = format_date(parse_date(shift.date.strip()))
    except ValueError:
        raise EmptySelection(ConstraintViolation.INVALID_DATE)
    try:
        start = time_to_minutes(shift.start_time)
        end = time_to_minutes(shift.end_time)
    except ValueError as e:
        raise InvalidTimeRange(str(e))
    return replace(shift, date=day, start_time=_minutes_to_time(start), end_time=_minutes_to_time(end))


def validate_shift(shift: Shift, existing_shifts: Iterable[Shift],
                   config: GridConfig = None) -> float:
    """Validate a shift before commit and return its computed hours."""
    config = config or GridConfig()

    if not shift.employee_id:
        raise EmptySelection(ConstraintViolation.EMPTY_EMPLOYEE)
    if not shift.date:
        raise EmptySelection(ConstraintViolation.EMPTY_DATE)
    if not shift.start_time or not shift.end_time:
        raise EmptySelection(ConstraintViolation.EMPTY_TIMES)

    shift = normalize_shift(shift)
    start = time_to_minutes(shift.start_time)
    end = time_to_minutes(shift.end_time)

    hours = calculate_shift_hours(shift.start_time, shift.end_time)
    if hours <= 0:
        raise InvalidTimeRange(ConstraintViolation.INVALID_RANGE)
    if hours < config.min_duration:
        raise BelowMinimumDuration(ConstraintViolation.BELOW_MINIMUM)

    if start < config.start_hour * 60 or end > config.end_hour * 60:
        raise InvalidTimeRange(ConstraintViolation.OUTSIDE_WINDOW.format(
            start=_window_label(config.start_hour), end=_window_label(config.end_hour)))
    if start % config.snap_minutes or end % config.snap_minutes:
        raise InvalidTimeRange(ConstraintViolation.OFF_GRID.format(minutes=config.snap_minutes))

    conflicts = find_conflicts(existing_shifts, shift)
    if conflicts:
        raise SchedulingConflict(ConstraintViolation.CONFLICT, conflicts)

    return hours
