"""Unit tests for candidate slot enumeration."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from slotwise.domain import TimeWindow, WorkingHours
from slotwise.scheduling.slot_finder import find_slots, first_slot, round_up_to_grid
from tests.factories import WorkingHoursFactory, at

HOUR = timedelta(hours=1)


def _window(start: datetime, end: datetime) -> TimeWindow:
    return TimeWindow(start=start, end=end)


class TestRoundUpToGrid:
    """Tests for round_up_to_grid."""

    @pytest.mark.parametrize(
        ("instant", "expected"),
        [
            (at(19, 9, 0), at(19, 9, 0)),
            (at(19, 9, 1), at(19, 9, 15)),
            (at(19, 9, 14), at(19, 9, 15)),
            (at(19, 9, 0).replace(second=30), at(19, 9, 15)),
            (at(19, 23, 50), at(20, 0, 0)),
        ],
    )
    def test_rounding(self, instant: datetime, expected: datetime) -> None:
        assert round_up_to_grid(instant, 15) == expected


class TestFindSlots:
    """Tests for find_slots and first_slot."""

    def test_enumerates_grid_within_working_hours(self) -> None:
        slots = find_slots(at(19, 8), at(19, 12), [], HOUR, WorkingHours(), UTC)

        assert slots[0] == _window(at(19, 9), at(19, 10))
        assert slots[-1] == _window(at(19, 11), at(19, 12))
        assert len(slots) == 9

    def test_skips_busy_time(self) -> None:
        busy = [_window(at(19, 9), at(19, 10))]
        slot = first_slot(at(19, 8), at(19, 17), busy, HOUR, WorkingHours(), UTC)
        assert slot == _window(at(19, 10), at(19, 11))

    def test_adjacent_busy_time_is_not_a_conflict(self) -> None:
        busy = [_window(at(19, 8), at(19, 9))]
        slot = first_slot(at(19, 8), at(19, 17), busy, HOUR, WorkingHours(), UTC)
        assert slot.start == at(19, 9)

    def test_start_is_rounded_up(self) -> None:
        slot = first_slot(at(19, 9, 7), at(19, 17), [], HOUR, WorkingHours(), UTC)
        assert slot.start == at(19, 9, 15)

    def test_avoids_break(self) -> None:
        hours = WorkingHoursFactory.create(break_start_time="12:00", break_end_time="13:00")
        slot = first_slot(at(19, 11, 30), at(19, 17), [], HOUR, hours, UTC)
        assert slot == _window(at(19, 13), at(19, 14))

    def test_skips_weekends(self) -> None:
        saturday = at(24, 10)
        slot = first_slot(saturday, at(27, 17), [], HOUR, WorkingHours(), UTC)
        assert slot == _window(at(26, 9), at(26, 10))

    def test_slot_never_ends_after_horizon(self) -> None:
        slots = find_slots(at(19, 8), at(19, 10, 30), [], HOUR, WorkingHours(), UTC)
        assert all(s.end <= at(19, 10, 30) for s in slots)
        assert slots[-1].start == at(19, 9, 30)

    def test_never_spans_end_of_day(self) -> None:
        slots = find_slots(at(19, 15), at(20, 12), [], 2 * HOUR, WorkingHours(), UTC)
        assert all(s.start.date() == s.end.date() for s in slots)
        assert all(s.end.hour <= 17 for s in slots)

    def test_duration_longer_than_working_day(self) -> None:
        assert find_slots(at(19, 8), at(30, 17), [], 9 * HOUR, WorkingHours(), UTC) == []

    def test_working_hours_in_user_offset(self) -> None:
        plus_four = timezone(timedelta(hours=4))
        slot = first_slot(at(19, 4), at(20, 0), [], HOUR, WorkingHours(), plus_four)
        assert slot.start == at(19, 5)
        assert slot.start.utcoffset() == timedelta(hours=4)

    def test_malformed_working_hours_fall_back(self) -> None:
        hours = WorkingHoursFactory.create(start_time="morning", end_time="25:00")
        slot = first_slot(at(19, 8), at(19, 17), [], HOUR, hours, UTC)
        assert slot == _window(at(19, 9), at(19, 10))

    def test_inverted_working_hours_yield_nothing(self) -> None:
        hours = WorkingHoursFactory.create(start_time="17:00", end_time="09:00")
        assert find_slots(at(19, 0), at(23, 23), [], HOUR, hours, UTC) == []

    def test_empty_horizon(self) -> None:
        assert find_slots(at(19, 12), at(19, 9), [], HOUR, WorkingHours(), UTC) == []

    def test_candidates_never_overlap_busy(self) -> None:
        busy = [
            _window(at(19, 9, 30), at(19, 11)),
            _window(at(19, 13), at(19, 13, 45)),
            _window(at(20, 8), at(20, 16)),
        ]
        slots = find_slots(at(19, 8), at(21, 17), busy, HOUR, WorkingHours(), UTC)

        assert slots
        for slot in slots:
            assert not any(slot.overlaps(b) for b in busy)
            assert slot.start.minute % 15 == 0
            assert 9 <= slot.start.hour and slot.end <= slot.start.replace(hour=17, minute=0)
