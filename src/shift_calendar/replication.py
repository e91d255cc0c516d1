"""
Shift replication (copy/paste) for Shift Calendar

Holds a clipboard template, either a single shift's pattern or a source week,
and builds the new shifts for a paste target. Templates stay in place until
cleared so the same pattern can be pasted any number of times.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, List, Optional

from .conflicts import find_conflicts
from .data_models import Shift, TEMP_SHIFT_ID
from .time_grid import calculate_shift_hours, format_date, parse_date, start_of_week
from .validation import ConstraintViolation, EmptySelection, SchedulingConflict

logger = logging.getLogger(__name__)


class WeekPastePolicy(Enum):
    """How a week paste treats generated shifts that overlap existing ones"""
    TRUSTED = "trusted"  # paste everything without checking
    SKIP_CONFLICTS = "skip_conflicts"  # drop the overlapping shifts
    REJECT = "reject"  # refuse the whole paste


@dataclass(frozen=True)
class ShiftTemplate:
    employee_id: str
    start_time: str
    end_time: str


@dataclass(frozen=True)
class WeekTemplate:
    week_start: date


class ReplicationEngine:
    """Clipboard for single shifts and whole weeks"""

    def __init__(self, week_paste_policy: WeekPastePolicy = WeekPastePolicy.TRUSTED):
        self.week_paste_policy = week_paste_policy
        self.shift_template: Optional[ShiftTemplate] = None
        self.week_template: Optional[WeekTemplate] = None

    @property
    def has_shift_template(self) -> bool:
        return self.shift_template is not None

    @property
    def has_week_template(self) -> bool:
        return self.week_template is not None

    def copy_shift(self, shift: Shift) -> ShiftTemplate:
        self.shift_template = ShiftTemplate(
            employee_id=shift.employee_id,
            start_time=shift.start_time,
            end_time=shift.end_time
        )
        logger.info(f"Copied shift pattern {shift.start_time}-{shift.end_time} for employee {shift.employee_id}")
        return self.shift_template

    def copy_week(self, reference_date: date) -> WeekTemplate:
        self.week_template = WeekTemplate(week_start=start_of_week(reference_date))
        logger.info(f"Copied week starting {self.week_template.week_start}")
        return self.week_template

    def clear(self):
        self.shift_template = None
        self.week_template = None

    def clear_shift(self):
        self.shift_template = None

    def clear_week(self):
        self.week_template = None

    def paste_shift(self, target_date: str, existing_shifts: Iterable[Shift]) -> Shift:
        """Build the shift to create on target_date from the copied pattern"""
        template = self.shift_template
        if template is None:
            raise EmptySelection(ConstraintViolation.NOTHING_COPIED)

        candidate = Shift(
            id=TEMP_SHIFT_ID,
            employee_id=template.employee_id,
            date=target_date,
            start_time=template.start_time,
            end_time=template.end_time,
            hours=calculate_shift_hours(template.start_time, template.end_time)
        )
        conflicts = find_conflicts(existing_shifts, candidate)
        if conflicts:
            raise SchedulingConflict(ConstraintViolation.PASTE_CONFLICT.format(date=target_date), conflicts)
        return candidate

    def source_week_shifts(self, shifts: Iterable[Shift]) -> List[Shift]:
        if self.week_template is None:
            return []
        source_start = self.week_template.week_start
        return [s for s in shifts if start_of_week(parse_date(s.date)) == source_start]

    def paste_week(self, target_week_start: date, existing_shifts: Iterable[Shift]) -> List[Shift]:
        """Build the batch of shifts that replicates the copied week onto the target week"""
        if self.week_template is None:
            raise EmptySelection(ConstraintViolation.NOTHING_COPIED)

        existing = list(existing_shifts)
        source_start = self.week_template.week_start
        target_start = start_of_week(target_week_start)
        shifts_to_copy = self.source_week_shifts(existing)
        if not shifts_to_copy:
            raise EmptySelection(ConstraintViolation.EMPTY_WEEK)

        day_offset = (target_start - source_start).days
        generated = [
            Shift(
                id=None,
                employee_id=s.employee_id,
                date=format_date(parse_date(s.date) + timedelta(days=day_offset)),
                start_time=s.start_time,
                end_time=s.end_time,
                hours=s.hours
            )
            for s in shifts_to_copy
        ]

        if self.week_paste_policy is WeekPastePolicy.TRUSTED:
            return generated

        clashing = [s for s in generated if find_conflicts(existing, s)]
        if clashing and self.week_paste_policy is WeekPastePolicy.REJECT:
            raise SchedulingConflict(
                f"{len(clashing)} pasted shift(s) would overlap existing shifts in the target week.",
                clashing
            )
        if clashing:
            logger.warning(f"Skipping {len(clashing)} conflicting shift(s) in week paste")
        return [s for s in generated if s not in clashing]
