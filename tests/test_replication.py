"""
Test Suite for Shift and Week Copy/Paste
"""

import pytest
from datetime import date

from conftest import make_shift
from shift_calendar.data_models import TEMP_SHIFT_ID
from shift_calendar.replication import ReplicationEngine, WeekPastePolicy
from shift_calendar.validation import ConstraintViolation, EmptySelection, SchedulingConflict


@pytest.fixture
def source_week():
    """Shifts in the week of Sunday 2024-01-07, plus one in the following week"""
    return [
        make_shift("s1", "alice", "2024-01-07", "09:00", "13:00"),
        make_shift("s2", "alice", "2024-01-09", "10:00", "12:00"),
        make_shift("s3", "bob", "2024-01-13", "14:00", "18:30"),
        make_shift("s4", "bob", "2024-01-15", "09:00", "10:00"),
    ]


def test_paste_shift_builds_candidate_from_template():
    engine = ReplicationEngine()
    engine.copy_shift(make_shift("s1", "alice", "2024-01-09", "09:00", "12:30"))
    candidate = engine.paste_shift("2024-01-11", [])
    assert candidate.id == TEMP_SHIFT_ID
    assert candidate.employee_id == "alice"
    assert candidate.date == "2024-01-11"
    assert (candidate.start_time, candidate.end_time, candidate.hours) == ("09:00", "12:30", 3.5)


def test_shift_template_survives_repeated_pastes():
    engine = ReplicationEngine()
    engine.copy_shift(make_shift("s1", "alice", "2024-01-09", "09:00", "12:00"))
    for day in ("2024-01-10", "2024-01-11", "2024-01-12"):
        assert engine.paste_shift(day, []).date == day
    assert engine.has_shift_template


def test_paste_shift_refuses_overlap():
    engine = ReplicationEngine()
    engine.copy_shift(make_shift("s1", "alice", "2024-01-09", "09:00", "12:00"))
    existing = [make_shift("s9", "alice", "2024-01-10", "11:00", "13:00")]
    with pytest.raises(SchedulingConflict) as exc_info:
        engine.paste_shift("2024-01-10", existing)
    assert exc_info.value.message == ConstraintViolation.PASTE_CONFLICT.format(date="2024-01-10")
    assert exc_info.value.conflicts == existing
    # Pasting onto the source day itself conflicts with the original
    with pytest.raises(SchedulingConflict):
        engine.paste_shift("2024-01-09", [make_shift("s1", "alice", "2024-01-09", "09:00", "12:00")])


def test_paste_without_template():
    engine = ReplicationEngine()
    with pytest.raises(EmptySelection):
        engine.paste_shift("2024-01-10", [])
    with pytest.raises(EmptySelection) as exc_info:
        engine.paste_week(date(2024, 1, 14), [])
    assert exc_info.value.message == ConstraintViolation.NOTHING_COPIED


def test_copy_week_normalizes_to_sunday():
    engine = ReplicationEngine()
    template = engine.copy_week(date(2024, 1, 10))
    assert template.week_start == date(2024, 1, 7)


def test_paste_week_shifts_dates_by_week_offset(source_week):
    engine = ReplicationEngine()
    engine.copy_week(date(2024, 1, 9))
    batch = engine.paste_week(date(2024, 1, 14), source_week)

    assert [s.date for s in batch] == ["2024-01-14", "2024-01-16", "2024-01-20"]
    moved = batch[1]
    assert (moved.employee_id, moved.start_time, moved.end_time, moved.hours) == ("alice", "10:00", "12:00", 2.0)
    assert all(s.id is None for s in batch)


def test_paste_week_target_may_be_any_day_of_the_week(source_week):
    engine = ReplicationEngine()
    engine.copy_week(date(2024, 1, 7))
    batch = engine.paste_week(date(2024, 1, 31), source_week)  # Wednesday, week of Jan 28
    assert [s.date for s in batch] == ["2024-01-28", "2024-01-30", "2024-02-03"]


def test_paste_week_into_earlier_week(source_week):
    engine = ReplicationEngine()
    engine.copy_week(date(2024, 1, 7))
    batch = engine.paste_week(date(2023, 12, 31), source_week)
    assert [s.date for s in batch] == ["2023-12-31", "2024-01-02", "2024-01-06"]


def test_paste_week_from_empty_week(source_week):
    engine = ReplicationEngine()
    engine.copy_week(date(2024, 2, 5))
    with pytest.raises(EmptySelection) as exc_info:
        engine.paste_week(date(2024, 2, 12), source_week)
    assert exc_info.value.message == ConstraintViolation.EMPTY_WEEK


def test_trusted_policy_pastes_overlapping_shifts(source_week):
    existing = source_week + [make_shift("x1", "alice", "2024-01-16", "11:00", "15:00")]
    engine = ReplicationEngine(WeekPastePolicy.TRUSTED)
    engine.copy_week(date(2024, 1, 7))
    assert len(engine.paste_week(date(2024, 1, 14), existing)) == 3


def test_skip_conflicts_policy_drops_overlaps(source_week):
    existing = source_week + [make_shift("x1", "alice", "2024-01-16", "11:00", "15:00")]
    engine = ReplicationEngine(WeekPastePolicy.SKIP_CONFLICTS)
    engine.copy_week(date(2024, 1, 7))
    batch = engine.paste_week(date(2024, 1, 14), existing)
    assert [s.date for s in batch] == ["2024-01-14", "2024-01-20"]


def test_reject_policy_refuses_whole_paste(source_week):
    existing = source_week + [make_shift("x1", "alice", "2024-01-16", "11:00", "15:00")]
    engine = ReplicationEngine(WeekPastePolicy.REJECT)
    engine.copy_week(date(2024, 1, 7))
    with pytest.raises(SchedulingConflict) as exc_info:
        engine.paste_week(date(2024, 1, 14), existing)
    assert [s.date for s in exc_info.value.conflicts] == ["2024-01-16"]
    # Without overlaps the same policy lets everything through
    assert len(engine.paste_week(date(2024, 1, 21), source_week)) == 3


def test_week_template_persists_and_clears(source_week):
    engine = ReplicationEngine()
    engine.copy_week(date(2024, 1, 7))
    engine.paste_week(date(2024, 1, 14), source_week)
    assert engine.has_week_template
    engine.copy_shift(source_week[0])
    engine.clear_week()
    assert not engine.has_week_template and engine.has_shift_template
    engine.copy_week(date(2024, 1, 7))
    engine.clear()
    assert not engine.has_week_template and not engine.has_shift_template
