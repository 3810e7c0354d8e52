"""Unit tests for slot selection strategies."""

from datetime import timedelta

import pytest

from slotwise.config.models import SchedulerConfig
from slotwise.domain import TaskPriority, TimeWindow
from slotwise.scheduling.selection import (
    BalancedSlotStrategy,
    EarliestSlotStrategy,
    PercentileSlotStrategy,
    PrioritySlotSelector,
    create_slot_strategy,
    select_optimal_slot,
)
from tests.factories import MONDAY_0800, at


def _hourly(count: int) -> list[TimeWindow]:
    start = at(19, 9)
    return [
        TimeWindow(start=start + timedelta(hours=i), end=start + timedelta(hours=i + 1))
        for i in range(count)
    ]


class TestStrategies:
    """Tests for the individual strategies."""

    def test_earliest(self) -> None:
        candidates = _hourly(5)
        assert EarliestSlotStrategy().select(candidates, at(20, 0), MONDAY_0800) == candidates[0]

    def test_percentile_position(self) -> None:
        candidates = _hourly(10)
        chosen = PercentileSlotStrategy(0.7).select(candidates, at(30, 0), MONDAY_0800)
        assert chosen == candidates[7]

    def test_percentile_clamps_to_last(self) -> None:
        candidates = _hourly(3)
        assert PercentileSlotStrategy(1.0).select(candidates, at(30, 0), MONDAY_0800) == candidates[2]

    def test_percentile_single_candidate(self) -> None:
        candidates = _hourly(1)
        assert PercentileSlotStrategy().select(candidates, at(30, 0), MONDAY_0800) == candidates[0]

    def test_percentile_validates_range(self) -> None:
        with pytest.raises(ValueError):
            PercentileSlotStrategy(1.5)

    def test_balanced_targets_a_third_of_the_way(self) -> None:
        """Now 08:00 and deadline 17:00: the target is 11:00."""
        candidates = _hourly(8)
        chosen = BalancedSlotStrategy().select(candidates, at(19, 17), MONDAY_0800)
        assert chosen.start == at(19, 11)

    def test_balanced_tie_goes_to_earlier(self) -> None:
        candidates = [
            TimeWindow(start=at(19, 10), end=at(19, 11)),
            TimeWindow(start=at(19, 12), end=at(19, 13)),
        ]
        # Target 11:00, both candidates one hour away
        chosen = BalancedSlotStrategy().select(candidates, at(19, 17), MONDAY_0800)
        assert chosen.start == at(19, 10)


class TestPrioritySlotSelector:
    """Tests for the priority-driven choice."""

    def test_high_priority_takes_earliest(self) -> None:
        selector = PrioritySlotSelector()
        strategy = selector.strategy_for(TaskPriority.HIGH, at(30, 0), MONDAY_0800)
        assert strategy.name == "earliest"

    def test_low_priority_far_from_deadline_is_deferred(self) -> None:
        selector = PrioritySlotSelector()
        strategy = selector.strategy_for(
            TaskPriority.LOW, MONDAY_0800 + timedelta(days=7), MONDAY_0800
        )
        assert strategy.name == "percentile"

    def test_low_priority_near_deadline_is_balanced(self) -> None:
        selector = PrioritySlotSelector()
        strategy = selector.strategy_for(
            TaskPriority.LOW, MONDAY_0800 + timedelta(days=2), MONDAY_0800
        )
        assert strategy.name == "balanced"

    def test_defer_threshold_is_configurable(self) -> None:
        selector = PrioritySlotSelector(SchedulerConfig(low_priority_defer_days=1))
        strategy = selector.strategy_for(
            TaskPriority.LOW, MONDAY_0800 + timedelta(days=2), MONDAY_0800
        )
        assert strategy.name == "percentile"

    def test_deferred_position_is_configurable(self) -> None:
        selector = PrioritySlotSelector(SchedulerConfig(low_priority_percentile=0.5))
        chosen = selector.select(
            _hourly(8), TaskPriority.LOW, MONDAY_0800 + timedelta(days=7), MONDAY_0800
        )
        assert chosen.start == at(19, 13)

    def test_medium_priority_is_balanced(self) -> None:
        strategy = PrioritySlotSelector().strategy_for(
            TaskPriority.MEDIUM, at(30, 0), MONDAY_0800
        )
        assert strategy.name == "balanced"

    def test_sorts_candidates_before_selecting(self) -> None:
        candidates = list(reversed(_hourly(4)))
        chosen = select_optimal_slot(candidates, TaskPriority.HIGH, at(20, 0), MONDAY_0800)
        assert chosen.start == at(19, 9)

    def test_empty_candidates_raise(self) -> None:
        with pytest.raises(ValueError):
            select_optimal_slot([], TaskPriority.HIGH, at(20, 0), MONDAY_0800)

    def test_result_is_always_a_candidate(self) -> None:
        candidates = _hourly(7)
        for priority in TaskPriority:
            chosen = select_optimal_slot(candidates, priority, at(26, 8), MONDAY_0800)
            assert chosen in candidates


class TestCreateSlotStrategy:
    """Tests for the strategy factory."""

    def test_creates_by_name(self) -> None:
        assert isinstance(create_slot_strategy("percentile", percentile=0.5), PercentileSlotStrategy)

    def test_unknown_name(self) -> None:
        with pytest.raises(ValueError, match="Unknown strategy"):
            create_slot_strategy("random")
