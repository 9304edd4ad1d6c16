# task_assignment/history.py
from __future__ import annotations

from datetime import datetime
from typing import Protocol

import pandas as pd
from sqlalchemy import (
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    case,
    create_engine,
    func,
    or_,
    select,
)
from sqlalchemy.engine import Engine

from task_assignment.workers import WorkerRecord

VIOLATION_COLUMNS = ["violation_type", "violation_count", "total_fines"]

metadata = MetaData()

# Read model of the two tables the profiler consumes. The owning application
# manages the full schema and its migrations.
workers_table = Table(
    "workers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("worker_id", String, unique=True, nullable=False),
    Column("name", String, nullable=False),
    Column("department", String, server_default="Warehouse"),
    Column("created_at", DateTime, server_default=func.current_timestamp()),
)

worker_scans_table = Table(
    "worker_scans",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("worker_id", String, nullable=False, index=True),
    Column("order_barcode", String, nullable=False),
    Column("sku", String),
    Column("order_type", String),
    Column("retailer", String),
    Column("timestamp", DateTime, server_default=func.current_timestamp()),
    Column("status", String, server_default="in_progress"),
    Column("violation_type", String),
    Column("violations_prevented", Text),
    Column("violations_occurred", Text),
    Column("estimated_fine_saved", Float, server_default="0"),
    Column("estimated_fine_incurred", Float, server_default="0"),
)


class HistoryStore(Protocol):
    """Read interface over historical worker performance."""

    def violation_history(self, worker_id: str, since: datetime) -> pd.DataFrame:
        """Columns: violation_type, violation_count, total_fines."""
        ...

    def scan_totals(self, worker_id: str, since: datetime) -> tuple[int, int]:
        """Return (total_scans, successful_scans)."""
        ...

    def worker_department(self, worker_id: str) -> str | None: ...

    def list_workers(self) -> list[WorkerRecord]: ...


class SqlHistoryStore:
    """HistoryStore backed by any SQLAlchemy engine (SQLite by default)."""

    def __init__(self, engine: Engine | str) -> None:
        self.engine: Engine = (
            create_engine(engine) if isinstance(engine, str) else engine
        )

    def violation_history(self, worker_id: str, since: datetime) -> pd.DataFrame:
        s = worker_scans_table.c
        stmt = (
            select(
                s.violation_type,
                func.count().label("violation_count"),
                func.coalesce(func.sum(s.estimated_fine_incurred), 0.0).label(
                    "total_fines"
                ),
            )
            .where(
                s.worker_id == worker_id,
                s.violations_occurred.is_not(None),
                s.violations_occurred != "[]",
                s.timestamp >= since,
            )
            .group_by(s.violation_type)
            .order_by(s.violation_type)
        )
        with self.engine.connect() as conn:
            df = pd.read_sql(stmt, conn)
        if df.empty:
            return pd.DataFrame(columns=VIOLATION_COLUMNS)
        df = df.dropna(subset=["violation_type"]).reset_index(drop=True)
        df["violation_count"] = df["violation_count"].astype(int)
        df["total_fines"] = df["total_fines"].astype(float)
        return df[VIOLATION_COLUMNS]

    def scan_totals(self, worker_id: str, since: datetime) -> tuple[int, int]:
        s = worker_scans_table.c
        successful = case(
            (or_(s.violations_occurred.is_(None), s.violations_occurred == "[]"), 1),
            else_=0,
        )
        stmt = select(func.count(), func.sum(successful)).where(
            s.worker_id == worker_id, s.timestamp >= since
        )
        with self.engine.connect() as conn:
            total, ok = conn.execute(stmt).one()
        return int(total or 0), int(ok or 0)

    def worker_department(self, worker_id: str) -> str | None:
        w = workers_table.c
        stmt = select(w.department).where(w.worker_id == worker_id)
        with self.engine.connect() as conn:
            return conn.execute(stmt).scalar_one_or_none()

    def list_workers(self) -> list[WorkerRecord]:
        w = workers_table.c
        stmt = select(w.worker_id, w.name, w.department).order_by(w.name)
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).all()
        # Plain rows keep NULL departments as None rather than NaN.
        return [
            WorkerRecord(
                worker_id=str(row.worker_id),
                name=str(row.name),
                department=row.department or "Warehouse",
            )
            for row in rows
        ]


def create_schema(engine: Engine) -> None:
    """Create the read-model tables if they do not exist yet."""
    metadata.create_all(engine)
