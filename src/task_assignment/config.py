from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional


@dataclass
class Config:

    ### HISTORICAL DATA ###

    # Trailing window used for violation and scan queries
    HISTORY_WINDOW_DAYS: int = 90

    # Accuracy assumed for workers with no scans in the window
    DEFAULT_ACCURACY: float = 0.8

    # Department used when the store has none for a worker
    DEFAULT_DEPARTMENT: str = "Warehouse"

    ### PROFILE NOISE ###

    # Speed jitter is drawn uniformly from [-SPEED_JITTER, +SPEED_JITTER]
    SPEED_JITTER: float = 0.2

    # RANDOM SEED (None = fresh entropy on every profile)
    SEED: Optional[int] = None

    ### OPTIMIZER SETUP ###

    # Threads used to fetch skill profiles concurrently
    NUM_PARALLEL_WORKERS: int = 8

    # Upper bound on candidate workers scored per call
    MAX_WORKERS_PER_CALL: int = 200

    ### STORAGE / OUTPUT ###

    DATABASE_URL: str = "sqlite:///compliance.db"
    OUTPUT_DIR: Path = field(default_factory=lambda: Path("outputs"))

    def validate(self) -> None:
        """
        Validate the Config object has sensible values before optimizing.
        """
        if self.HISTORY_WINDOW_DAYS <= 0:
            raise ValueError("HISTORY_WINDOW_DAYS must be > 0.")
        if not (0.0 <= self.DEFAULT_ACCURACY <= 1.0):
            raise ValueError("DEFAULT_ACCURACY must be within [0, 1].")
        if not (0.0 <= self.SPEED_JITTER <= 0.5):
            raise ValueError("SPEED_JITTER must be within [0, 0.5].")
        if self.NUM_PARALLEL_WORKERS <= 0:
            raise ValueError("NUM_PARALLEL_WORKERS must be > 0.")
        if self.MAX_WORKERS_PER_CALL < 2:
            raise ValueError("MAX_WORKERS_PER_CALL must be >= 2.")
        if self.SEED is not None and not isinstance(self.SEED, int):
            raise ValueError("SEED must be an int or None.")
        if not self.DEFAULT_DEPARTMENT:
            raise ValueError("DEFAULT_DEPARTMENT must be non-empty.")

    def history_since(self, now: datetime | None = None) -> datetime:
        """Start of the trailing history window."""
        now = now or utc_now()
        return now - timedelta(days=self.HISTORY_WINDOW_DAYS)


def utc_now() -> datetime:
    """Naive UTC timestamp, comparable with SQLite CURRENT_TIMESTAMP values."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


cfg = Config()
