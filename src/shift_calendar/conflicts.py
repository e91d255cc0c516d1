"""
Conflict detection for shift assignments.

Two shifts conflict when they belong to the same employee, fall on the same
date and their time ranges overlap. Ranges are half-open, so a shift ending
at 12:00 and one starting at 12:00 do not conflict.
"""

import logging
from typing import Callable, Iterable, List, Optional

from .data_models import Shift
from .time_grid import time_to_minutes

logger = logging.getLogger(__name__)


def _is_complete(candidate: Shift) -> bool:
    return bool(candidate.employee_id and candidate.date and
                candidate.start_time and candidate.end_time)


def find_conflicts(existing_shifts: Iterable[Shift], candidate: Shift) -> List[Shift]:
    """Return the existing shifts that overlap the candidate.

    The candidate's own id is excluded so an edited shift never conflicts with
    its stored version. An incomplete candidate has nothing to conflict with.
    """
    if not _is_complete(candidate):
        return []

    cand_start = time_to_minutes(candidate.start_time)
    cand_end = time_to_minutes(candidate.end_time)

    overlapping = []
    for shift in existing_shifts:
        if shift.employee_id != candidate.employee_id or shift.date != candidate.date:
            continue
        if candidate.id is not None and shift.id == candidate.id:
            continue
        if cand_start < time_to_minutes(shift.end_time) and cand_end > time_to_minutes(shift.start_time):
            overlapping.append(shift)
    return overlapping


def has_conflict(existing_shifts: Iterable[Shift], candidate: Shift) -> bool:
    return bool(find_conflicts(existing_shifts, candidate))


class ConflictDetector:
    """Checks candidates against the live shift collection"""

    def __init__(self, shift_provider: Callable[[], List[Shift]]):
        self.shift_provider = shift_provider

    def find_conflicts(self, candidate: Shift,
                       existing_shifts: Optional[Iterable[Shift]] = None) -> List[Shift]:
        shifts = self.shift_provider() if existing_shifts is None else existing_shifts
        conflicts = find_conflicts(shifts, candidate)
        if conflicts:
            logger.info(
                f"Shift {candidate.start_time}-{candidate.end_time} on {candidate.date} "
                f"for employee {candidate.employee_id} overlaps {len(conflicts)} shift(s)"
            )
        return conflicts

    def has_conflict(self, candidate: Shift,
                     existing_shifts: Optional[Iterable[Shift]] = None) -> bool:
        return bool(self.find_conflicts(candidate, existing_shifts))
