from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import pandas as pd

DEFAULT_WORKERS_JSON = Path(__file__).resolve().parent / "example_workers.json"


@dataclass(frozen=True, slots=True)
class WorkerRecord:
    """
    A candidate worker as stored in the workers table.
    """

    worker_id: str
    name: str
    department: str = "Warehouse"

    def __post_init__(self) -> None:
        if not str(self.worker_id).strip():
            raise ValueError("worker_id must be non-empty.")

    def to_dict(self) -> dict[str, str]:
        return {
            "worker_id": self.worker_id,
            "name": self.name,
            "department": self.department,
        }


def workers_to_dataframe(workers: Sequence[WorkerRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [w.to_dict() for w in workers], columns=["worker_id", "name", "department"]
    )


def workers_from_json(path: str | Path | None = None) -> list[WorkerRecord]:
    """
    Load worker records from a JSON file on disk.

    If `path` is omitted, the loader reads the bundled `example_workers.json`.
    Files may contain either a list of worker objects or an object with a
    top-level `workers` array.
    """

    file_path = Path(path) if path is not None else DEFAULT_WORKERS_JSON
    file_path = file_path.expanduser()

    if file_path.suffix.lower() != ".json":
        raise ValueError("workers_from_json expects a path to a .json file.")
    if not file_path.exists():
        raise FileNotFoundError(f"Workers JSON file not found: {file_path}")

    try:
        data = json.loads(file_path.read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {file_path}") from exc

    if isinstance(data, Mapping):
        entries = data.get("workers")
        if entries is None:
            raise ValueError("JSON file must contain a list or a 'workers' key.")
    elif isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
        entries = data
    else:
        raise TypeError("JSON file must contain a list of worker objects.")

    if isinstance(entries, (str, bytes, bytearray)):
        raise TypeError("JSON file must contain a list of worker objects.")

    return [_worker_from_mapping(raw, file_path) for raw in entries]


def _worker_from_mapping(raw: Any, source: Path) -> WorkerRecord:
    if not isinstance(raw, Mapping):
        raise TypeError("Each worker entry must be an object/dict.")
    worker_id = raw.get("worker_id", raw.get("workerId", raw.get("id")))
    if worker_id in (None, ""):
        raise ValueError(f"Worker entry missing 'worker_id' in {source}")
    return WorkerRecord(
        worker_id=str(worker_id),
        name=str(raw.get("name", "")),
        department=str(raw.get("department") or "Warehouse"),
    )
