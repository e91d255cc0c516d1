"""
Scheduler Logic for Shift Calendar

Coordinates commits coming from the calendar: validates shifts against the
live shift set, hands accepted writes to the persistence store in the
background, and tracks the sync state shown in the status bar.
"""

import itertools
import logging
import threading
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Dict, List, Optional

from .conflicts import ConflictDetector
from .data_manager import DataManager
from .data_models import Shift, TEMP_SHIFT_ID
from .replication import ReplicationEngine, WeekPastePolicy
from .time_grid import start_of_week
from .validation import normalize_shift, validate_shift

logger = logging.getLogger(__name__)


@dataclass
class SyncStatus:
    """Progress of background writes to the store"""
    pending: int = 0
    last_error: Optional[str] = None

    @property
    def syncing(self) -> bool:
        return self.pending > 0

    @property
    def failed(self) -> bool:
        return self.last_error is not None

    def describe(self) -> str:
        if self.syncing:
            return "Syncing..."
        if self.failed:
            return f"Sync failed: {self.last_error}"
        return "Saved"


def run_in_background(task: Callable[[], None]):
    """Default dispatcher: run the write on a daemon thread"""
    threading.Thread(target=task, daemon=True).start()


class ShiftScheduler:
    """Validates calendar commits and forwards them to the shift store"""

    def __init__(self, data_manager: DataManager,
                 dispatcher: Optional[Callable[[Callable[[], None]], None]] = None,
                 week_paste_policy: Optional[WeekPastePolicy] = None,
                 on_sync_change: Optional[Callable[[SyncStatus], None]] = None):
        self.data_manager = data_manager
        self.dispatcher = dispatcher or run_in_background
        self.on_sync_change = on_sync_change
        self.grid_config = data_manager.get_grid_config()

        if week_paste_policy is None:
            week_paste_policy = WeekPastePolicy(data_manager.get_setting("weekPastePolicy", "trusted"))
        self.replication = ReplicationEngine(week_paste_policy)
        self.conflict_detector = ConflictDetector(self.live_shifts)

        self.sync_status = SyncStatus()
        self._status_lock = threading.Lock()
        # Accepted shifts whose write has not finished, keyed by write token
        self._in_flight: Dict[int, List[Shift]] = {}
        self._tokens = itertools.count()

    # Sync bookkeeping
    def _notify(self):
        if self.on_sync_change:
            self.on_sync_change(self.sync_status)

    def _mark_started(self, token: int, pending_shifts: List[Shift]):
        with self._status_lock:
            self.sync_status.pending += 1
            if pending_shifts:
                self._in_flight[token] = pending_shifts
        self._notify()

    def _mark_finished(self, token: int, error: Optional[str] = None):
        with self._status_lock:
            self.sync_status.pending -= 1
            self.sync_status.last_error = error
            self._in_flight.pop(token, None)
        self._notify()

    def _dispatch(self, description: str, operation: Callable[[], object],
                  pending_shifts: Optional[List[Shift]] = None):
        """Run a store write without blocking the caller.

        pending_shifts take part in conflict checks until the write finishes,
        so commits made in the meantime cannot overlap them.
        """
        token = next(self._tokens)
        self._mark_started(token, list(pending_shifts or []))

        def task():
            try:
                operation()
            except Exception as e:
                logger.error(f"{description} failed: {e}", exc_info=True)
                self._mark_finished(token, error=str(e))
                return
            logger.info(f"{description} completed")
            self._mark_finished(token)

        self.dispatcher(task)

    def live_shifts(self) -> List[Shift]:
        """Stored shifts overlaid with writes still in flight"""
        with self._status_lock:
            overlays = [s for batch in self._in_flight.values() for s in batch]
        replaced = {s.id for s in overlays if s.id is not None}
        stored = [s for s in self.data_manager.get_shifts() if s.id not in replaced]
        return stored + overlays

    # Single shifts
    def validate_shift(self, shift: Shift) -> Shift:
        """Return the canonical shift with computed hours, or raise a SchedulingError"""
        hours = validate_shift(shift, self.live_shifts(), self.grid_config)
        normalized = normalize_shift(shift)
        return normalized.with_times(normalized.start_time, normalized.end_time, hours)

    def save_shift(self, shift: Shift) -> Shift:
        """Validate and persist a new or edited shift"""
        validated = self.validate_shift(shift)

        if validated.id and validated.id != TEMP_SHIFT_ID and self.data_manager.get_shift(validated.id):
            self._dispatch(f"Update of shift {validated.id}",
                           lambda: self.data_manager.update_shift(validated.id, validated),
                           [validated])
        else:
            self._dispatch(f"Creation of shift on {validated.date}",
                           lambda: self.data_manager.create_shift(validated),
                           [replace(validated, id=None)])
        return validated

    def delete_shift(self, shift_id: str):
        self._dispatch(f"Deletion of shift {shift_id}",
                       lambda: self.data_manager.delete_shift(shift_id))

    # Replication
    def copy_shift(self, shift: Shift):
        self.replication.copy_shift(shift)

    def paste_shift(self, target_date: str) -> Shift:
        candidate = self.replication.paste_shift(target_date, self.live_shifts())
        self._dispatch(f"Paste of shift on {target_date}",
                       lambda: self.data_manager.create_shift(candidate),
                       [replace(candidate, id=None)])
        return candidate

    def copy_week(self, reference_date: date):
        self.replication.copy_week(reference_date)

    def paste_week(self, target_week_start: date) -> List[Shift]:
        batch = self.replication.paste_week(target_week_start, self.live_shifts())
        if not batch:
            logger.info("Week paste produced no shifts to create")
            return batch
        self._dispatch(f"Paste of {len(batch)} shifts into week of {start_of_week(target_week_start)}",
                       lambda: self.data_manager.create_many(batch),
                       batch)
        return batch

    def clear_clipboard(self):
        self.replication.clear()

    # Queries
    def get_visible_shifts(self, week_day: date, employee_filter: str = "all") -> List[Shift]:
        shifts = self.data_manager.get_shifts_for_week(week_day)
        if employee_filter == "all":
            return shifts
        return [s for s in shifts if s.employee_id == employee_filter]

    def get_weekly_hours(self, week_day: date) -> Dict[str, float]:
        """Total scheduled hours per employee id for the week containing week_day"""
        totals: Dict[str, float] = {}
        for shift in self.data_manager.get_shifts_for_week(week_day):
            totals[shift.employee_id] = round(totals.get(shift.employee_id, 0) + shift.hours, 2)
        return totals
