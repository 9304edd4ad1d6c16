# task_assignment/result_types.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional

import pandas as pd

from task_assignment.workers import WorkerRecord


@dataclass(frozen=True, slots=True)
class Candidate:
    worker: WorkerRecord
    score: float
    expected_fine: float
    risk_reduction: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "worker": self.worker.to_dict(),
            "score": self.score,
            "expectedFine": self.expected_fine,
            "riskReduction": self.risk_reduction,
        }


@dataclass(frozen=True, slots=True)
class TaskAssignment:
    primary: Candidate
    backup: Optional[Candidate] = None  # None when only one worker was scored

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary": self.primary.to_dict(),
            "backup": self.backup.to_dict() if self.backup is not None else None,
        }


@dataclass(frozen=True, slots=True)
class Prediction:
    task_id: str
    task_name: str
    task_type: str
    assigned_worker: str
    success_rate: float
    expected_fine: float
    risk_level: str
    warning: Optional[str]
    potential_fine: float


PREDICTION_COLUMNS = [
    "task_id",
    "task_name",
    "task_type",
    "assigned_worker",
    "success_rate",
    "expected_fine",
    "risk_level",
    "warning",
    "potential_fine",
]


@dataclass
class OptimizationResult:
    """Structured output of one optimize() call."""

    order_id: str
    assignments: dict[str, TaskAssignment]
    predictions: list[Prediction]
    total_expected_fines: float
    max_possible_fines: float
    risk_reduction: float
    risk_reduction_percentage: int
    strategy: Optional[str] = None
    workers_considered: int = 0

    def predictions_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [asdict(p) for p in self.predictions], columns=PREDICTION_COLUMNS
        )

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "orderId": self.order_id,
            "assignments": {k: v.to_dict() for k, v in self.assignments.items()},
            "predictions": [
                {
                    "taskId": p.task_id,
                    "taskName": p.task_name,
                    "taskType": p.task_type,
                    "assignedWorker": p.assigned_worker,
                    "successRate": p.success_rate,
                    "expectedFine": p.expected_fine,
                    "riskLevel": p.risk_level,
                    "warning": p.warning,
                    "potentialFine": p.potential_fine,
                }
                for p in self.predictions
            ],
            "totalExpectedFines": self.total_expected_fines,
            "maxPossibleFines": self.max_possible_fines,
            "riskReduction": self.risk_reduction,
            "riskReductionPercentage": self.risk_reduction_percentage,
        }
        if self.strategy is not None:
            body["strategy"] = self.strategy
        return body
