from .history import HistoryGenConfig, create_workers, generate_scans, seed_history

__all__ = ["HistoryGenConfig", "create_workers", "generate_scans", "seed_history"]
