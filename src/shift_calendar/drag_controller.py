"""
Drag Interaction Controller for the weekly calendar

Turns pointer events on the time grid into shift create/move/resize requests.
The controller holds at most one session at a time, modeled as a tagged union
of immutable states:

    Idle -> Selecting    pointer down on empty grid space (create)
    Idle -> Interacting  pointer down on a shift block (move / resize)

A session ends on the global pointer release. The release listener is a
scoped subscription: acquired when a session starts and released on every
exit path, so a drag that leaves the grid still completes.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Protocol, Tuple, Union

from .data_models import Shift
from .time_grid import TimeGridMapper, hour_to_time_string, time_to_hours

logger = logging.getLogger(__name__)


class InteractionKind(Enum):
    MOVE = "move"
    RESIZE_TOP = "resize-top"
    RESIZE_BOTTOM = "resize-bottom"


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Selecting:
    day: str
    start_hour: float
    current_hour: float


@dataclass(frozen=True)
class Interacting:
    original: Shift
    kind: InteractionKind
    initial_start: float
    initial_end: float
    pointer_offset_hours: float
    live_candidate: Shift


InteractionState = Union[Idle, Selecting, Interacting]

IDLE = Idle()


class ReleaseSource(Protocol):
    """Anything that can deliver global pointer-release notifications"""

    def subscribe(self, handler: Callable[[], None]) -> Callable[[], None]:
        """Register handler and return a callable that unregisters it"""
        ...


def hit_region(offset_in_block: float, block_height: float, handle_size: float) -> InteractionKind:
    """Interaction kind for a press at offset_in_block pixels inside a shift block"""
    if offset_in_block <= handle_size:
        return InteractionKind.RESIZE_TOP
    if offset_in_block >= block_height - handle_size:
        return InteractionKind.RESIZE_BOTTOM
    return InteractionKind.MOVE


class DragInteractionController:
    """State machine for create, move and resize drags on the weekly grid"""

    def __init__(self, mapper: TimeGridMapper, release_source: ReleaseSource,
                 on_add_shift: Callable[..., None],
                 on_save_shift: Callable[[Shift], None],
                 read_only: bool = False):
        self.mapper = mapper
        self.release_source = release_source
        self.on_add_shift = on_add_shift
        self.on_save_shift = on_save_shift
        self.read_only = read_only
        self.state: InteractionState = IDLE
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def is_active(self) -> bool:
        return not isinstance(self.state, Idle)

    @property
    def active_shift_id(self) -> Optional[str]:
        if isinstance(self.state, Interacting):
            return self.state.original.id
        return None

    def _can_start(self) -> bool:
        if self.read_only:
            return False
        if self.is_active:
            logger.debug("Ignoring pointer down while a session is active")
            return False
        return True

    def _begin(self, state: InteractionState):
        self._unsubscribe = self.release_source.subscribe(self.pointer_up)
        self.state = state

    def _end(self) -> InteractionState:
        """Clear the session and release the subscription; returns the final state"""
        final_state = self.state
        self.state = IDLE
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()
        return final_state

    def pointer_down_on_grid(self, day: str, y: float, container_height: float) -> bool:
        if not self._can_start():
            return False
        hour = self.mapper.pixel_to_hour(y, container_height)
        self._begin(Selecting(day=day, start_hour=hour, current_hour=hour))
        return True

    def pointer_down_on_shift(self, shift: Shift, kind: InteractionKind,
                              y: float, container_height: float) -> bool:
        if not self._can_start():
            return False

        start = time_to_hours(shift.start_time)
        end = time_to_hours(shift.end_time)
        offset = 0.0
        if kind is InteractionKind.MOVE:
            # Keeps the grab point under the cursor while moving
            offset = self.mapper.pixel_to_hour(y, container_height) - start

        self._begin(Interacting(
            original=shift,
            kind=kind,
            initial_start=start,
            initial_end=end,
            pointer_offset_hours=offset,
            live_candidate=shift
        ))
        return True

    def pointer_move(self, y: float, container_height: float):
        state = self.state
        if isinstance(state, Idle):
            return

        pointer_hour = self.mapper.pixel_to_hour(y, container_height)
        min_duration = self.mapper.config.min_duration

        if isinstance(state, Selecting):
            if pointer_hour != state.current_hour:
                self.state = Selecting(state.day, state.start_hour, pointer_hour)
            return

        new_start, new_end = state.initial_start, state.initial_end
        if state.kind is InteractionKind.RESIZE_TOP:
            new_start = min(pointer_hour, new_end - min_duration)
        elif state.kind is InteractionKind.RESIZE_BOTTOM:
            new_end = max(pointer_hour, new_start + min_duration)
        else:
            duration = state.initial_end - state.initial_start
            new_start = pointer_hour - state.pointer_offset_hours
            new_end = new_start + duration

        new_start, new_end = self.mapper.clamp_range(new_start, new_end)
        candidate = state.live_candidate.with_times(
            hour_to_time_string(new_start),
            hour_to_time_string(new_end),
            round(new_end - new_start, 2)
        )
        self.state = Interacting(
            original=state.original,
            kind=state.kind,
            initial_start=state.initial_start,
            initial_end=state.initial_end,
            pointer_offset_hours=state.pointer_offset_hours,
            live_candidate=candidate
        )

    def pointer_up(self):
        final_state = self._end()

        if isinstance(final_state, Selecting):
            start = min(final_state.start_hour, final_state.current_hour)
            end = max(final_state.start_hour, final_state.current_hour)
            if end - start >= self.mapper.config.min_duration:
                self.on_add_shift(final_state.day, hour_to_time_string(start), hour_to_time_string(end))
            elif final_state.start_hour == final_state.current_hour:
                # Plain click: the host opens a blank form for the day
                self.on_add_shift(final_state.day)

        elif isinstance(final_state, Interacting):
            original = final_state.original
            candidate = final_state.live_candidate
            if (candidate.start_time, candidate.end_time) != (original.start_time, original.end_time):
                logger.info(
                    f"Shift {original.id} {final_state.kind.value}: "
                    f"{original.start_time}-{original.end_time} -> {candidate.start_time}-{candidate.end_time}"
                )
                self.on_save_shift(candidate)

    def cancel(self):
        """Discard the current session without emitting anything"""
        if self.is_active:
            self._end()

    def selection_range(self) -> Optional[Tuple[str, float, float]]:
        """(day, start, end) of an in-progress create drag"""
        state = self.state
        if isinstance(state, Selecting):
            return (state.day,
                    min(state.start_hour, state.current_hour),
                    max(state.start_hour, state.current_hour))
        return None

    def apply_preview(self, shifts: List[Shift]) -> List[Shift]:
        """Shifts as they should be drawn, with the edited one replaced by its live candidate"""
        state = self.state
        if not isinstance(state, Interacting):
            return shifts
        candidate = state.live_candidate
        return [candidate if s.id == candidate.id else s for s in shifts]
