"""
Day layout for the weekly calendar.

Overlapping shifts on one day are packed side by side into display columns
with a greedy first-fit pass over the shifts sorted by start time. The result
is deterministic but not guaranteed to use the minimum number of columns.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterator, List

from .data_models import Shift
from .time_grid import TimeGridMapper, time_to_hours, time_to_minutes


@dataclass
class ShiftPlacement:
    """Position of one shift block, in percent of the day column"""
    shift: Shift
    column_index: int
    total_columns: int
    left_percent: float
    width_percent: float
    top_percent: float
    height_percent: float


@dataclass
class DayLayout:
    columns: List[List[Shift]] = field(default_factory=list)

    @property
    def total_columns(self) -> int:
        return len(self.columns)

    @property
    def width_percent(self) -> float:
        if not self.columns:
            return 100.0
        return 100 / len(self.columns)

    def column_of(self, shift_id: str) -> int:
        for index, column in enumerate(self.columns):
            if any(s.id == shift_id for s in column):
                return index
        raise KeyError(shift_id)

    def placements(self, mapper: TimeGridMapper = None) -> Iterator[ShiftPlacement]:
        mapper = mapper or TimeGridMapper()
        total_hours = mapper.config.total_hours
        width = self.width_percent
        for index, column in enumerate(self.columns):
            for shift in column:
                start = time_to_hours(shift.start_time)
                end = time_to_hours(shift.end_time)
                yield ShiftPlacement(
                    shift=shift,
                    column_index=index,
                    total_columns=self.total_columns,
                    left_percent=index * width,
                    width_percent=width,
                    top_percent=mapper.hour_to_percent(start),
                    height_percent=(end - start) / total_hours * 100
                )


class ColumnPacker:
    """Assigns overlapping same-day shifts to display columns"""

    def pack_day(self, shifts: List[Shift]) -> DayLayout:
        # sorted() is stable, so equal start times keep their input order
        ordered = sorted(shifts, key=lambda s: time_to_minutes(s.start_time))
        layout = DayLayout()

        for shift in ordered:
            start = time_to_minutes(shift.start_time)
            for column in layout.columns:
                if time_to_minutes(column[-1].end_time) <= start:
                    column.append(shift)
                    break
            else:
                layout.columns.append([shift])

        return layout

    def pack_week(self, shifts: List[Shift], days: List[date]) -> Dict[str, DayLayout]:
        by_day: Dict[str, List[Shift]] = {d.strftime("%Y-%m-%d"): [] for d in days}
        for shift in shifts:
            if shift.date in by_day:
                by_day[shift.date].append(shift)
        return {day: self.pack_day(day_shifts) for day, day_shifts in by_day.items()}


def pack_day(shifts: List[Shift]) -> DayLayout:
    return ColumnPacker().pack_day(shifts)


def month_grid(year: int, month: int) -> List[List[date]]:
    """Full weeks (Sunday first) covering the month, including spill-over days"""
    cal = calendar.Calendar(firstweekday=calendar.SUNDAY)
    return cal.monthdatescalendar(year, month)
