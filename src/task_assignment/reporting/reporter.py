from __future__ import annotations

from pathlib import Path

import pandas as pd

from task_assignment.config import Config
from task_assignment.order import OrderBreakdown
from task_assignment.reporting.plots import (
    show_expected_fines,
    show_strategy_comparison,
)
from task_assignment.reporting.text_report import (
    ReportDocument,
    render_comparison,
    render_text_report,
    set_active_report,
)
from task_assignment.result_types import OptimizationResult


class Reporter:
    """High-level orchestrator: renders text reports, charts and the PDF."""

    def __init__(
        self,
        cfg: Config,
        num_print_examples: int = 10,
        enable_plots: bool = True,
    ) -> None:
        self.cfg = cfg
        self.num_print_examples = num_print_examples
        self.enable_plots = enable_plots

    @property
    def out_dir(self) -> Path:
        return Path(self.cfg.OUTPUT_DIR)

    def render_text_report(
        self, res: OptimizationResult, order: OrderBreakdown | None = None
    ) -> None:
        """Public entry point for callers that want text reporting only."""
        render_text_report(res, order, num_print_examples=self.num_print_examples)

    def post_optimize(
        self, res: OptimizationResult, order: OrderBreakdown | None = None
    ) -> None:
        """Render textual report (and optional plots) after optimizing."""
        report_doc = ReportDocument(self.out_dir / "report.pdf")
        set_active_report(report_doc)
        try:
            self.render_text_report(res, order)
            if not self.enable_plots:
                return
            show_expected_fines(res, out_dir=self.out_dir)
        finally:
            set_active_report(None)
            report_doc.write()

    def compare(self, frame: pd.DataFrame) -> None:
        """Render a strategy comparison table (and chart) into its own PDF."""
        report_doc = ReportDocument(self.out_dir / "strategy_comparison.pdf")
        set_active_report(report_doc)
        try:
            render_comparison(frame)
            if self.enable_plots:
                show_strategy_comparison(frame, out_dir=self.out_dir)
        finally:
            set_active_report(None)
            report_doc.write()
