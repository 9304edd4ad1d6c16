# task_assignment/profiles.py
from __future__ import annotations

import logging
import zlib
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Callable, Mapping, TypeVar

import numpy as np
import pandas as pd

from task_assignment.catalog import SKILL_KEYS, VIOLATION_SKILL_MAP
from task_assignment.config import Config, cfg, utc_now
from task_assignment.history import VIOLATION_COLUMNS, HistoryStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_ACCURACY = 0.1
MIN_SPEED = 0.5
VIOLATION_ACCURACY_PENALTY = 0.1
MAX_VIOLATION_ACCURACY_PENALTY = 0.5
VIOLATION_SPEED_PENALTY = 0.05


def _frozen(table: dict[str, dict[str, float]]) -> Mapping[str, Mapping[str, float]]:
    return MappingProxyType({k: MappingProxyType(dict(v)) for k, v in table.items()})


# Prior skill level per department, as a multiplier on the worker's base accuracy.
DEPARTMENT_BASELINES: Mapping[str, Mapping[str, float]] = _frozen(
    {
        "Warehouse": {
            "label_placement": 1.0,
            "sku_verification": 1.0,
            "asn_preparation": 0.8,
            "carton_selection": 1.0,
            "packing_verification": 0.9,
            "upc_verification": 1.0,
        },
        "Packaging": {
            "label_placement": 0.7,
            "sku_verification": 0.7,
            "asn_preparation": 0.6,
            "carton_selection": 1.0,
            "packing_verification": 1.0,
            "upc_verification": 0.8,
        },
        "Quality Control": {
            "label_placement": 1.0,
            "sku_verification": 1.0,
            "asn_preparation": 0.9,
            "carton_selection": 1.0,
            "packing_verification": 1.0,
            "upc_verification": 1.0,
        },
        "Shipping": {
            "label_placement": 0.6,
            "sku_verification": 0.6,
            "asn_preparation": 1.0,
            "carton_selection": 0.7,
            "packing_verification": 0.7,
            "upc_verification": 0.6,
        },
    }
)


def _offsets(*values: float) -> dict[str, float]:
    return dict(zip(SKILL_KEYS, values))


# Individual accuracy offsets for the seeded roster; unknown workers get none.
WORKER_VARIANCE: Mapping[str, Mapping[str, float]] = _frozen(
    {
        "johnny123": _offsets(0.05, -0.02, -0.08, 0.03, -0.01, 0.04),
        "john456": _offsets(0.08, 0.05, -0.05, 0.06, 0.02, 0.07),
        "sarah789": _offsets(-0.15, -0.12, -0.20, 0.08, 0.12, -0.08),
        "mike001": _offsets(-0.05, 0.02, -0.10, 0.04, -0.03, 0.03),
        "lisa002": _offsets(0.06, 0.08, -0.02, 0.05, 0.10, 0.07),
        "david003": _offsets(-0.12, -0.08, -0.18, 0.06, 0.09, -0.05),
        "emma004": _offsets(0.02, 0.04, -0.06, 0.07, -0.02, 0.05),
        "carlos005": _offsets(-0.20, -0.18, 0.12, -0.08, -0.10, -0.15),
        "jessica006": _offsets(-0.10, -0.06, -0.16, 0.07, 0.11, -0.03),
        "alex007": _offsets(0.01, 0.03, -0.07, 0.05, -0.01, 0.04),
        "maria008": _offsets(0.07, 0.09, -0.01, 0.06, 0.11, 0.08),
        "kevin009": _offsets(-0.08, -0.04, -0.14, 0.05, 0.08, -0.02),
        "rachel010": _offsets(0.03, 0.05, -0.05, 0.08, -0.01, 0.06),
        "tom011": _offsets(-0.18, -0.16, 0.10, -0.06, -0.08, -0.13),
        "amy012": _offsets(-0.11, -0.07, -0.17, 0.04, 0.07, -0.04),
    }
)


@dataclass(slots=True)
class SkillStats:
    accuracy: float
    speed: float
    violations: int = 0

    def to_dict(self) -> dict[str, float]:
        return {
            "accuracy": self.accuracy,
            "speed": self.speed,
            "violations": self.violations,
        }


@dataclass(slots=True)
class SkillProfile:
    """
    Per-skill accuracy/speed/violation model for one worker.
    """

    worker_id: str
    skills: dict[str, SkillStats]
    total_scans: int = 0
    successful_scans: int = 0
    overall_accuracy: float = 0.8
    violation_history: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "workerId": self.worker_id,
            "skills": {k: v.to_dict() for k, v in self.skills.items()},
            "totalScans": self.total_scans,
            "successfulScans": self.successful_scans,
            "overallAccuracy": self.overall_accuracy,
            "violationHistory": dict(self.violation_history),
        }


def _clamp(x: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, x))


class SkillProfiler:
    """
    Builds SkillProfiles from a HistoryStore.

    Accuracy starts from the worker's scan success rate over the trailing
    window (or `Config.DEFAULT_ACCURACY` without scans), is scaled by the
    department baseline and shifted by the individual variance, then each
    recorded violation type reduces the matching skill's accuracy and speed.

    Query failures never propagate: each failing query is logged and
    replaced by its empty/default result.
    """

    def __init__(
        self,
        store: HistoryStore,
        config: Config | None = None,
        department_baselines: Mapping[str, Mapping[str, float]] = DEPARTMENT_BASELINES,
        worker_variance: Mapping[str, Mapping[str, float]] = WORKER_VARIANCE,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.cfg = config or cfg
        self.department_baselines = department_baselines
        self.worker_variance = worker_variance
        self._now = now

    # ---------- queries ----------

    def _safe(self, what: str, worker_id: str, fn: Callable[[], T], default: T) -> T:
        try:
            return fn()
        except Exception:
            logger.warning(
                "Failed to load %s for worker %s; using defaults",
                what,
                worker_id,
                exc_info=True,
            )
            return default

    def _rng(self, worker_id: str) -> np.random.Generator:
        if self.cfg.SEED is None:
            return np.random.default_rng()
        # Keyed on the worker so results do not depend on fetch order.
        return np.random.default_rng([self.cfg.SEED, zlib.crc32(worker_id.encode())])

    # ---------- profile ----------

    def get_skill_profile(self, worker_id: str) -> SkillProfile:
        since = self.cfg.history_since(self._now())

        violations = self._safe(
            "violation history",
            worker_id,
            lambda: self.store.violation_history(worker_id, since),
            pd.DataFrame(columns=VIOLATION_COLUMNS),
        )
        total_scans, successful_scans = self._safe(
            "scan totals",
            worker_id,
            lambda: self.store.scan_totals(worker_id, since),
            (0, 0),
        )
        department = self._safe(
            "department",
            worker_id,
            lambda: self.store.worker_department(worker_id),
            None,
        )

        base_accuracy = (
            successful_scans / total_scans
            if total_scans > 0
            else self.cfg.DEFAULT_ACCURACY
        )
        baseline = self.department_baselines.get(
            department or self.cfg.DEFAULT_DEPARTMENT,
            self.department_baselines.get(self.cfg.DEFAULT_DEPARTMENT, {}),
        )
        variance = self.worker_variance.get(worker_id, {})

        rng = self._rng(worker_id)
        jitter = self.cfg.SPEED_JITTER
        skills: dict[str, SkillStats] = {}
        for skill in SKILL_KEYS:
            accuracy = base_accuracy * baseline.get(skill, 1.0) + variance.get(skill, 0.0)
            speed = 1.0 + float(rng.uniform(-jitter, jitter)) if jitter else 1.0
            skills[skill] = SkillStats(
                accuracy=_clamp(accuracy, MIN_ACCURACY, 1.0),
                speed=max(MIN_SPEED, speed),
            )

        history: dict[str, int] = {}
        for row in violations.itertuples(index=False):
            count = int(row.violation_count)
            history[str(row.violation_type)] = count
            skill = VIOLATION_SKILL_MAP.get(row.violation_type)
            if skill is None or skill not in skills:
                continue
            stats = skills[skill]
            penalty = min(
                count * VIOLATION_ACCURACY_PENALTY, MAX_VIOLATION_ACCURACY_PENALTY
            )
            stats.accuracy = max(MIN_ACCURACY, stats.accuracy - penalty)
            stats.violations = count
            stats.speed = max(MIN_SPEED, stats.speed - count * VIOLATION_SPEED_PENALTY)

        return SkillProfile(
            worker_id=worker_id,
            skills=skills,
            total_scans=total_scans,
            successful_scans=successful_scans,
            overall_accuracy=base_accuracy,
            violation_history=history,
        )
