from __future__ import annotations

from .plots import show_expected_fines, show_strategy_comparison
from .reporter import Reporter
from .text_report import ReportDocument, render_comparison, render_text_report

__all__ = [
    "Reporter",
    "ReportDocument",
    "render_text_report",
    "render_comparison",
    "show_expected_fines",
    "show_strategy_comparison",
]
