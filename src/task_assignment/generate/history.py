# history_generation.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from task_assignment.catalog import TASK_CATALOG
from task_assignment.config import utc_now
from task_assignment.history import create_schema, workers_table
from task_assignment.profiles import DEPARTMENT_BASELINES
from task_assignment.workers import (
    WorkerRecord,
    workers_from_json,
    workers_to_dataframe,
)

_FINE_BY_VIOLATION = {t.violation_type: t.potential_fine for t in TASK_CATALOG.values()}


# ----------------------------
# Configuration container
# ----------------------------
@dataclass(slots=True)
class HistoryGenConfig:
    """
    Configuration for generation of synthetic scan history.
    """

    # Number of synthetic workers; None = the shipped example roster
    n: Optional[int] = None

    departments: Tuple[str, ...] = (
        "Warehouse",
        "Packaging",
        "Quality Control",
        "Shipping",
    )
    department_probs: Tuple[float, ...] = (0.40, 0.30, 0.15, 0.15)

    # Scans per worker are drawn uniformly from [min, max]
    scans_per_worker: Tuple[int, int] = (20, 60)

    # Per-scan probability of a violation, by department
    violation_rates: dict[str, float] = field(
        default_factory=lambda: {
            "Warehouse": 0.10,
            "Packaging": 0.15,
            "Quality Control": 0.05,
            "Shipping": 0.20,
        }
    )

    # Scans are spread over this many trailing days
    days: int = 90

    # RNG seed
    seed: Optional[int] = 7

    def validate(self) -> None:
        if self.n is not None and self.n <= 0:
            raise ValueError("n must be > 0 or None.")
        if len(self.departments) != len(self.department_probs):
            raise ValueError("departments and department_probs must be same length.")
        if not np.isclose(sum(self.department_probs), 1.0, atol=1e-9):
            raise ValueError("department_probs must sum to 1.0")
        if set(self.departments) != set(self.violation_rates.keys()):
            raise ValueError("violation_rates must have entries for all departments.")
        for dept, rate in self.violation_rates.items():
            if not (0.0 <= rate <= 1.0):
                raise ValueError(f"Invalid violation rate for department {dept}.")
        lo, hi = self.scans_per_worker
        if not (0 <= lo <= hi):
            raise ValueError("scans_per_worker must satisfy 0 <= min <= max.")
        if self.days <= 0:
            raise ValueError("days must be > 0")
        if self.seed is not None and not isinstance(self.seed, int):
            raise ValueError("seed must be an int or None.")


# ----------------------------
# Generation helpers
# ----------------------------
def _rng(seed: Optional[int]) -> np.random.Generator:
    return np.random.default_rng(seed) if seed is not None else np.random.default_rng()


def _violation_weights(department: str) -> tuple[list[str], np.ndarray]:
    """Weak department skills get proportionally more violations."""
    baseline = DEPARTMENT_BASELINES.get(department, DEPARTMENT_BASELINES["Warehouse"])
    types = [t.violation_type for t in TASK_CATALOG.values()]
    weights = np.array(
        [1.1 - baseline.get(t.skill_key, 1.0) for t in TASK_CATALOG.values()],
        dtype=float,
    )
    return types, weights / weights.sum()


# ----------------------------
# Core API
# ----------------------------
def create_workers(cfg: HistoryGenConfig) -> list[WorkerRecord]:
    cfg.validate()
    if cfg.n is None:
        return workers_from_json()

    g = _rng(cfg.seed)
    depts = g.choice(
        cfg.departments, size=cfg.n, p=np.array(cfg.department_probs, dtype=float)
    )
    return [
        WorkerRecord(
            worker_id=f"worker{i:03d}",
            name=f"Worker {i:03d}",
            department=str(depts[i]),
        )
        for i in range(cfg.n)
    ]


def generate_scans(
    workers: Sequence[WorkerRecord],
    cfg: HistoryGenConfig,
    now: datetime | None = None,
) -> pd.DataFrame:
    """
    Randomly generate worker_scans rows for `workers` over the trailing window.
    """
    cfg.validate()
    g = _rng(cfg.seed)
    now = now or utc_now()
    lo, hi = cfg.scans_per_worker

    rows = []
    for w in workers:
        n_scans = int(g.integers(lo, hi + 1))
        rate = cfg.violation_rates.get(w.department, 0.0)
        types, weights = _violation_weights(w.department)
        offsets = g.uniform(0, cfg.days, size=n_scans)
        violated = g.random(n_scans) < rate
        for k in range(n_scans):
            vtype = str(g.choice(types, p=weights)) if violated[k] else None
            fine = float(_FINE_BY_VIOLATION[vtype]) if vtype else 0.0
            rows.append(
                {
                    "worker_id": w.worker_id,
                    "order_barcode": f"ORD-{int(g.integers(10_000, 99_999))}",
                    "timestamp": now - timedelta(days=float(offsets[k])),
                    "status": "completed",
                    "violation_type": vtype,
                    "violations_occurred": json.dumps([vtype] if vtype else []),
                    "estimated_fine_incurred": fine,
                }
            )
    return pd.DataFrame(rows)


def seed_history(
    engine: Engine,
    cfg: HistoryGenConfig | None = None,
    now: datetime | None = None,
) -> list[WorkerRecord]:
    """
    Create the read-model tables and fill them with synthetic workers and
    scans. A store that already holds workers is left untouched.
    """
    cfg = cfg or HistoryGenConfig()
    create_schema(engine)
    with engine.connect() as conn:
        existing = conn.execute(select(func.count()).select_from(workers_table)).scalar()
    if existing:
        return []

    workers = create_workers(cfg)
    workers_to_dataframe(workers).to_sql(
        "workers", engine, if_exists="append", index=False
    )
    scans = generate_scans(workers, cfg, now=now)
    if not scans.empty:
        scans.to_sql("worker_scans", engine, if_exists="append", index=False)
    return workers
