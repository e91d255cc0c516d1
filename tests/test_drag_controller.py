"""
Test Suite for the Drag Interaction Controller

Drives create, move and resize sessions through pointer events and checks
what is emitted on release and that the release subscription never leaks.
"""

import pytest

from conftest import make_shift
from shift_calendar.drag_controller import (
    DragInteractionController, Idle, InteractionKind, Interacting, Selecting, hit_region
)
from shift_calendar.time_grid import TimeGridMapper

DAY = "2024-01-10"
HEIGHT = 624  # 40px per hour


def y_for(hour):
    return 12 + (hour - 8) * 40


class FakeReleaseSource:
    """Stand-in for the window-level pointer-release listener"""

    def __init__(self):
        self.handlers = []
        self.subscribe_calls = 0

    def subscribe(self, handler):
        self.subscribe_calls += 1
        self.handlers.append(handler)

        def unsubscribe():
            self.handlers.remove(handler)
        return unsubscribe

    def release(self):
        for handler in list(self.handlers):
            handler()


@pytest.fixture
def release_source():
    return FakeReleaseSource()


@pytest.fixture
def emitted():
    return {"add": [], "save": []}


@pytest.fixture
def controller(release_source, emitted):
    return DragInteractionController(
        TimeGridMapper(),
        release_source,
        on_add_shift=lambda *args: emitted["add"].append(args),
        on_save_shift=lambda shift: emitted["save"].append(shift)
    )


def test_drag_on_empty_grid_requests_creation(controller, release_source, emitted):
    assert controller.pointer_down_on_grid(DAY, y_for(9), HEIGHT)
    assert isinstance(controller.state, Selecting)
    assert len(release_source.handlers) == 1

    controller.pointer_move(y_for(10), HEIGHT)
    controller.pointer_move(y_for(11.5), HEIGHT)
    assert controller.selection_range() == (DAY, 9.0, 11.5)

    release_source.release()
    assert emitted["add"] == [(DAY, "09:00", "11:30")]
    assert isinstance(controller.state, Idle)
    assert release_source.handlers == []


def test_upward_drag_is_normalized(controller, release_source, emitted):
    controller.pointer_down_on_grid(DAY, y_for(14), HEIGHT)
    controller.pointer_move(y_for(12), HEIGHT)
    release_source.release()
    assert emitted["add"] == [(DAY, "12:00", "14:00")]


def test_click_requests_blank_form(controller, release_source, emitted):
    controller.pointer_down_on_grid(DAY, y_for(9), HEIGHT)
    release_source.release()
    assert emitted["add"] == [(DAY,)]
    assert release_source.handlers == []


def test_release_outside_grid_still_completes(controller, release_source, emitted):
    controller.pointer_down_on_grid(DAY, y_for(9), HEIGHT)
    controller.pointer_move(HEIGHT + 300, HEIGHT)  # dragged below the grid
    release_source.release()
    assert emitted["add"] == [(DAY, "09:00", "23:00")]


def test_move_preserves_duration(controller, release_source, emitted):
    shift = make_shift("s1", "alice", DAY, "09:00", "11:00")
    controller.pointer_down_on_shift(shift, InteractionKind.MOVE, y_for(10), HEIGHT)
    assert controller.active_shift_id == "s1"

    for target in (12, 13.5, 15, 17.5):
        controller.pointer_move(y_for(target), HEIGHT)
        candidate = controller.state.live_candidate
        assert candidate.hours == 2.0
        assert candidate.start_time == f"{int(target - 1):02d}:{'30' if target % 1 else '00'}"

    release_source.release()
    assert len(emitted["save"]) == 1
    saved = emitted["save"][0]
    assert (saved.id, saved.start_time, saved.end_time, saved.hours) == ("s1", "16:30", "18:30", 2.0)
    assert release_source.handlers == []


def test_move_is_clamped_to_the_grid(controller, release_source, emitted):
    shift = make_shift("s1", "alice", DAY, "09:00", "11:00")
    controller.pointer_down_on_shift(shift, InteractionKind.MOVE, y_for(9), HEIGHT)
    controller.pointer_move(-100, HEIGHT)
    assert controller.state.live_candidate.start_time == "08:00"
    controller.pointer_move(HEIGHT + 100, HEIGHT)
    candidate = controller.state.live_candidate
    assert candidate.end_time == "23:00"
    assert candidate.start_time == "22:30"


def test_resize_top_keeps_minimum_duration(controller, release_source, emitted):
    shift = make_shift("s1", "alice", DAY, "09:00", "10:00")
    controller.pointer_down_on_shift(shift, InteractionKind.RESIZE_TOP, y_for(9), HEIGHT)
    controller.pointer_move(y_for(9 + 35 / 60), HEIGHT)
    assert controller.state.live_candidate.start_time == "09:30"
    controller.pointer_move(y_for(11), HEIGHT)
    candidate = controller.state.live_candidate
    assert (candidate.start_time, candidate.end_time, candidate.hours) == ("09:30", "10:00", 0.5)

    release_source.release()
    assert emitted["save"][0].start_time == "09:30"


def test_resize_bottom_keeps_minimum_duration(controller, release_source, emitted):
    shift = make_shift("s1", "alice", DAY, "09:00", "10:00")
    controller.pointer_down_on_shift(shift, InteractionKind.RESIZE_BOTTOM, y_for(10), HEIGHT)
    controller.pointer_move(y_for(8), HEIGHT)
    candidate = controller.state.live_candidate
    assert (candidate.start_time, candidate.end_time) == ("09:00", "09:30")
    controller.pointer_move(y_for(12.5), HEIGHT)
    assert controller.state.live_candidate.end_time == "12:30"
    assert controller.state.live_candidate.hours == 3.5


def test_unchanged_interaction_is_discarded(controller, release_source, emitted):
    shift = make_shift("s1", "alice", DAY, "09:00", "11:00")
    controller.pointer_down_on_shift(shift, InteractionKind.MOVE, y_for(10), HEIGHT)
    controller.pointer_move(y_for(12), HEIGHT)
    controller.pointer_move(y_for(10), HEIGHT)  # back to where it started
    release_source.release()
    assert emitted["save"] == []
    assert isinstance(controller.state, Idle)
    assert release_source.handlers == []


def test_nested_pointer_down_is_ignored(controller, release_source, emitted):
    shift = make_shift("s1", "alice", DAY, "09:00", "11:00")
    assert controller.pointer_down_on_grid(DAY, y_for(13), HEIGHT)
    assert not controller.pointer_down_on_shift(shift, InteractionKind.MOVE, y_for(10), HEIGHT)
    assert not controller.pointer_down_on_grid(DAY, y_for(15), HEIGHT)
    assert isinstance(controller.state, Selecting)
    assert release_source.subscribe_calls == 1
    assert len(release_source.handlers) == 1


def test_read_only_rejects_sessions(release_source, emitted):
    controller = DragInteractionController(
        TimeGridMapper(), release_source,
        on_add_shift=lambda *args: emitted["add"].append(args),
        on_save_shift=lambda shift: emitted["save"].append(shift),
        read_only=True
    )
    shift = make_shift("s1", "alice", DAY, "09:00", "11:00")
    assert not controller.pointer_down_on_grid(DAY, y_for(9), HEIGHT)
    assert not controller.pointer_down_on_shift(shift, InteractionKind.MOVE, y_for(10), HEIGHT)
    assert release_source.subscribe_calls == 0
    assert not controller.is_active


def test_cancel_releases_subscription_without_emitting(controller, release_source, emitted):
    controller.pointer_down_on_grid(DAY, y_for(9), HEIGHT)
    controller.pointer_move(y_for(12), HEIGHT)
    controller.cancel()
    assert release_source.handlers == []
    assert not controller.is_active
    release_source.release()
    assert emitted["add"] == []


def test_move_without_session_is_ignored(controller, emitted):
    controller.pointer_move(y_for(12), HEIGHT)
    assert isinstance(controller.state, Idle)
    assert controller.selection_range() is None


def test_preview_replaces_edited_shift(controller):
    edited = make_shift("s1", "alice", DAY, "09:00", "11:00")
    other = make_shift("s2", "bob", DAY, "09:00", "11:00")
    assert controller.apply_preview([edited, other]) == [edited, other]

    controller.pointer_down_on_shift(edited, InteractionKind.MOVE, y_for(10), HEIGHT)
    controller.pointer_move(y_for(14), HEIGHT)
    assert isinstance(controller.state, Interacting)
    preview = controller.apply_preview([edited, other])
    assert preview[0].start_time == "13:00"
    assert preview[1] is other


@pytest.mark.parametrize(
    "offset, expected",
    [
        (0, InteractionKind.RESIZE_TOP),
        (8, InteractionKind.RESIZE_TOP),
        (9, InteractionKind.MOVE),
        (31, InteractionKind.MOVE),
        (32, InteractionKind.RESIZE_BOTTOM),
        (40, InteractionKind.RESIZE_BOTTOM),
    ],
)
def test_hit_region(offset, expected):
    assert hit_region(offset, 40, 8) is expected


def _raise_runtime_error(*args):
    raise RuntimeError("host callback failed")


@pytest.mark.parametrize("kind", ["create", "move"])
def test_failing_callback_still_ends_the_session(release_source, kind):
    controller = DragInteractionController(
        TimeGridMapper(),
        release_source,
        on_add_shift=_raise_runtime_error,
        on_save_shift=_raise_runtime_error
    )
    if kind == "create":
        controller.pointer_down_on_grid(DAY, y_for(9), HEIGHT)
        controller.pointer_move(y_for(11), HEIGHT)
    else:
        shift = make_shift("s1", "alice", DAY, "09:00", "11:00")
        controller.pointer_down_on_shift(shift, InteractionKind.MOVE, y_for(10), HEIGHT)
        controller.pointer_move(y_for(12), HEIGHT)

    with pytest.raises(RuntimeError):
        release_source.release()
    assert release_source.handlers == []
    assert isinstance(controller.state, Idle)

    # The next session subscribes afresh
    assert controller.pointer_down_on_grid(DAY, y_for(14), HEIGHT)
    assert len(release_source.handlers) == 1
