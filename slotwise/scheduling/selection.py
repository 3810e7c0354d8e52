"""Slot selection strategies.

The finder returns every free candidate; a selection strategy decides which
one a task actually gets. The priority-driven selector picks a strategy per
task:

- high priority takes the earliest candidate,
- low priority far from its deadline is pushed late in the candidate list,
- everything else aims a third of the way towards the deadline.
"""

import math
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Any

from slotwise.config.models.scheduler import SchedulerConfig
from slotwise.domain import TaskPriority, TimeWindow


class SlotSelectionStrategy(ABC):
    """Interface for choosing one window among sorted candidates.

    Contract guarantees:
        - Never called with an empty candidate list
        - Returns one of the given candidates
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return strategy identifier for logging."""
        pass

    @abstractmethod
    def select(
        self,
        candidates: list[TimeWindow],
        deadline: datetime,
        now: datetime,
    ) -> TimeWindow:
        """Pick a candidate.

        Args:
            candidates: Non-empty list sorted by start
            deadline: Horizon end of the task
            now: Current instant

        Returns:
            The chosen candidate
        """
        pass


class EarliestSlotStrategy(SlotSelectionStrategy):
    """Take the earliest-starting candidate."""

    @property
    def name(self) -> str:
        return "earliest"

    def select(
        self,
        candidates: list[TimeWindow],
        deadline: datetime,  # noqa: ARG002
        now: datetime,  # noqa: ARG002
    ) -> TimeWindow:
        return candidates[0]


class PercentileSlotStrategy(SlotSelectionStrategy):
    """Take the candidate at a fixed position of the sorted list."""

    def __init__(self, percentile: float = 0.7) -> None:
        if not 0.0 <= percentile <= 1.0:
            raise ValueError(f"percentile must be within [0, 1], got {percentile}")
        self._percentile = percentile

    @property
    def name(self) -> str:
        return "percentile"

    def select(
        self,
        candidates: list[TimeWindow],
        deadline: datetime,  # noqa: ARG002
        now: datetime,  # noqa: ARG002
    ) -> TimeWindow:
        index = min(len(candidates) - 1, math.floor(len(candidates) * self._percentile))
        return candidates[index]


class BalancedSlotStrategy(SlotSelectionStrategy):
    """Take the candidate starting closest to a point between now and the deadline.

    Ties go to the earlier candidate.
    """

    def __init__(self, fraction: float = 1 / 3) -> None:
        self._fraction = fraction

    @property
    def name(self) -> str:
        return "balanced"

    def select(
        self,
        candidates: list[TimeWindow],
        deadline: datetime,
        now: datetime,
    ) -> TimeWindow:
        target = now + (deadline - now) * self._fraction
        best = candidates[0]
        best_distance = abs(best.start - target)
        for candidate in candidates[1:]:
            distance = abs(candidate.start - target)
            if distance < best_distance:
                best, best_distance = candidate, distance
        return best


class PrioritySlotSelector:
    """Chooses a strategy from the task's priority and remaining time."""

    def __init__(self, config: SchedulerConfig | None = None) -> None:
        config = config or SchedulerConfig()
        self._defer_after = timedelta(days=config.low_priority_defer_days)
        self._earliest = create_slot_strategy("earliest")
        self._deferred = create_slot_strategy(
            "percentile", percentile=config.low_priority_percentile
        )
        self._balanced = create_slot_strategy("balanced")

    def strategy_for(
        self, priority: TaskPriority, deadline: datetime, now: datetime
    ) -> SlotSelectionStrategy:
        if priority == TaskPriority.HIGH:
            return self._earliest
        if priority == TaskPriority.LOW and deadline - now > self._defer_after:
            return self._deferred
        return self._balanced

    def select(
        self,
        candidates: list[TimeWindow],
        priority: TaskPriority,
        deadline: datetime,
        now: datetime,
    ) -> TimeWindow:
        """Pick a candidate for a task.

        Raises:
            ValueError: If there are no candidates
        """
        if not candidates:
            raise ValueError("Cannot select a slot from an empty candidate list")
        ordered = sorted(candidates, key=lambda w: w.start)
        return self.strategy_for(priority, deadline, now).select(ordered, deadline, now)


def select_optimal_slot(
    candidates: list[TimeWindow],
    priority: TaskPriority,
    deadline: datetime,
    now: datetime,
    config: SchedulerConfig | None = None,
) -> TimeWindow:
    """Priority-driven choice among candidates; see PrioritySlotSelector."""
    return PrioritySlotSelector(config).select(candidates, priority, deadline, now)


def create_slot_strategy(strategy: str, **kwargs: Any) -> SlotSelectionStrategy:
    """Factory function to create selection strategies by name.

    Raises:
        ValueError: If strategy name is not recognized
    """
    strategies: dict[str, type[SlotSelectionStrategy]] = {
        "earliest": EarliestSlotStrategy,
        "percentile": PercentileSlotStrategy,
        "balanced": BalancedSlotStrategy,
    }

    if strategy not in strategies:
        valid = ", ".join(strategies.keys())
        raise ValueError(f"Unknown strategy: {strategy}. Valid options: {valid}")

    return strategies[strategy](**kwargs)
