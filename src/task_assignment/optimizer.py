# task_assignment/optimizer.py
from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from task_assignment.catalog import TASK_CATALOG
from task_assignment.config import Config, cfg
from task_assignment.errors import NoWorkersAvailable
from task_assignment.order import OrderBreakdown, TaskInstance
from task_assignment.profiles import SkillProfile, SkillProfiler
from task_assignment.result_types import (
    Candidate,
    OptimizationResult,
    Prediction,
    TaskAssignment,
)
from task_assignment.scoring import FitResult, calculate_fit, risk_level
from task_assignment.workers import WorkerRecord

logger = logging.getLogger(__name__)


def _candidate(worker: WorkerRecord, fit: FitResult) -> Candidate:
    return Candidate(
        worker=worker,
        score=fit.score,
        expected_fine=fit.expected_fine,
        risk_reduction=fit.risk_reduction,
    )


def risk_reduction_percentage(risk_reduction: float, max_possible: float) -> int:
    """Share of the worst-case exposure removed, rounded half-up; 0 without exposure."""
    if max_possible <= 0:
        return 0
    return int(math.floor(risk_reduction / max_possible * 100 + 0.5))


class AssignmentOptimizer:
    """
    Assigns a primary and a backup worker to every task of an order.

    Each task is ranked independently over the whole candidate pool: every
    worker is scored with calculate_fit() and the pool is stable-sorted by
    descending score, so ties keep the input order of `workers`.
    """

    def __init__(self, profiler: SkillProfiler, config: Config | None = None) -> None:
        self.profiler = profiler
        self.cfg = config or cfg

    # ---------- profiles ----------

    def fetch_profiles(self, workers: Sequence[WorkerRecord]) -> list[SkillProfile]:
        """Fetch skill profiles concurrently; output order matches `workers`."""
        if not workers:
            return []
        n_threads = min(self.cfg.NUM_PARALLEL_WORKERS, len(workers))
        with ThreadPoolExecutor(
            max_workers=n_threads, thread_name_prefix="skill-profile"
        ) as pool:
            return list(
                pool.map(
                    self.profiler.get_skill_profile, [w.worker_id for w in workers]
                )
            )

    def _limit_pool(self, workers: Sequence[WorkerRecord]) -> list[WorkerRecord]:
        cap = self.cfg.MAX_WORKERS_PER_CALL
        if len(workers) > cap:
            logger.warning(
                "Worker pool of %d exceeds MAX_WORKERS_PER_CALL=%d; scoring the first %d",
                len(workers),
                cap,
                cap,
            )
            return list(workers[:cap])
        return list(workers)

    # ---------- ranking ----------

    @staticmethod
    def rank(
        task: TaskInstance,
        workers: Sequence[WorkerRecord],
        profiles: Sequence[SkillProfile],
    ) -> list[tuple[WorkerRecord, FitResult]]:
        scored = [(w, calculate_fit(task, p)) for w, p in zip(workers, profiles)]
        # sorted() is stable: equal scores keep worker-list order.
        return sorted(scored, key=lambda pair: pair[1].score, reverse=True)

    # ---------- optimize ----------

    def optimize(
        self, order: OrderBreakdown, workers: Sequence[WorkerRecord]
    ) -> OptimizationResult:
        if not workers:
            raise NoWorkersAvailable("No workers available for assignment.")

        pool = self._limit_pool(workers)
        profiles = self.fetch_profiles(pool)

        assignments: dict[str, TaskAssignment] = {}
        predictions: list[Prediction] = []
        for task in order.tasks:
            ranking = self.rank(task, pool, profiles)
            best_worker, best_fit = ranking[0]
            backup = _candidate(*ranking[1]) if len(ranking) > 1 else None

            assignments[task.id] = TaskAssignment(
                primary=_candidate(best_worker, best_fit), backup=backup
            )
            definition = TASK_CATALOG.get(task.type)
            predictions.append(
                Prediction(
                    task_id=task.id,
                    task_name=definition.name if definition else task.type,
                    task_type=task.type,
                    assigned_worker=best_worker.name,
                    success_rate=best_fit.success_rate,
                    expected_fine=best_fit.expected_fine,
                    risk_level=risk_level(best_fit.expected_fine),
                    warning=best_fit.warning,
                    potential_fine=task.potential_fine,
                )
            )

        total_expected = sum(p.expected_fine for p in predictions)
        max_possible = order.max_possible_fines
        reduction = max_possible - total_expected

        logger.debug(
            "Optimized order %s: %d tasks, %d workers, expected fines %.2f of %.2f",
            order.order_id,
            len(order.tasks),
            len(pool),
            total_expected,
            max_possible,
        )
        return OptimizationResult(
            order_id=order.order_id,
            assignments=assignments,
            predictions=predictions,
            total_expected_fines=total_expected,
            max_possible_fines=max_possible,
            risk_reduction=reduction,
            risk_reduction_percentage=risk_reduction_percentage(
                reduction, max_possible
            ),
            workers_considered=len(pool),
        )
