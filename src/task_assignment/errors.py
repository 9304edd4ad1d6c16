# task_assignment/errors.py
from __future__ import annotations


class AssignmentError(Exception):
    """Base class for failures surfaced to callers of the assignment engine."""


class InvalidOrder(AssignmentError, ValueError):
    """Order is missing an id or has a non-positive item count."""


class NoWorkersAvailable(AssignmentError, LookupError):
    """The candidate worker pool is empty."""


class UnknownTaskType(AssignmentError, KeyError):
    """Task type is not in the compliance task catalog."""

    def __init__(self, task_type: object) -> None:
        super().__init__(task_type)
        self.task_type = task_type

    def __str__(self) -> str:
        return f"Unknown task type: {self.task_type!r}"


class InvalidStrategy(AssignmentError, ValueError):
    """Simulation strategy is not one of optimized, random or worst."""
