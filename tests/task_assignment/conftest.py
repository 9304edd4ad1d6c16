# tests/task_assignment/conftest.py
from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Mapping

import pandas as pd
import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from task_assignment.config import Config
from task_assignment.history import VIOLATION_COLUMNS, SqlHistoryStore, create_schema
from task_assignment.workers import WorkerRecord

NOW = datetime(2024, 6, 1, 12, 0)


class FakeStore:
    """In-memory HistoryStore; names in `fail` raise on every call."""

    def __init__(
        self,
        workers: Iterable[WorkerRecord] = (),
        scans: Mapping[str, tuple[int, int]] | None = None,
        violations: Mapping[str, Mapping[str, int]] | None = None,
        departments: Mapping[str, str | None] | None = None,
        fail: Iterable[str] = (),
    ) -> None:
        self.workers = list(workers)
        self.scans = dict(scans or {})
        self.violations = dict(violations or {})
        self.departments = dict(
            departments
            if departments is not None
            else {w.worker_id: w.department for w in self.workers}
        )
        self.fail = set(fail)
        self.since: list[datetime] = []

    def _check(self, name: str) -> None:
        if name in self.fail:
            raise RuntimeError(f"{name} unavailable")

    def violation_history(self, worker_id: str, since: datetime) -> pd.DataFrame:
        self._check("violation_history")
        self.since.append(since)
        rows = [
            {"violation_type": t, "violation_count": c, "total_fines": 0.0}
            for t, c in self.violations.get(worker_id, {}).items()
        ]
        return pd.DataFrame(rows, columns=VIOLATION_COLUMNS)

    def scan_totals(self, worker_id: str, since: datetime) -> tuple[int, int]:
        self._check("scan_totals")
        return self.scans.get(worker_id, (0, 0))

    def worker_department(self, worker_id: str) -> str | None:
        self._check("worker_department")
        return self.departments.get(worker_id)

    def list_workers(self) -> list[WorkerRecord]:
        self._check("list_workers")
        return list(self.workers)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_store() -> Callable[..., FakeStore]:
    return FakeStore


@pytest.fixture
def quiet_cfg(tmp_path: Path) -> Config:
    """Deterministic config without speed jitter."""
    return Config(
        SEED=11,
        SPEED_JITTER=0.0,
        NUM_PARALLEL_WORKERS=2,
        OUTPUT_DIR=tmp_path / "outputs",
    )


@pytest.fixture
def engine(tmp_path: Path) -> Engine:
    # File-backed so every pool thread gets its own connection.
    eng = create_engine(f"sqlite:///{tmp_path / 'history.db'}")
    create_schema(eng)
    return eng


@pytest.fixture
def sql_store(engine: Engine) -> SqlHistoryStore:
    return SqlHistoryStore(engine)


@pytest.fixture
def two_workers() -> list[WorkerRecord]:
    return [
        WorkerRecord("ace", "Ace Accurate", "Quality Control"),
        WorkerRecord("bob", "Bob Bumbling", "Shipping"),
    ]
