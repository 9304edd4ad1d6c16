from __future__ import annotations

from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt
import pandas as pd
from matplotlib.backends.backend_pdf import PdfPages

from task_assignment.order import OrderBreakdown
from task_assignment.result_types import OptimizationResult

A4_PORTRAIT = (8.27, 11.69)


class ReportDocument:
    """Printed report lines plus attached figures, written out as one PDF."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self.lines: list[str] = []
        self.figures: list[plt.Figure] = []

    def add_text(self, text: str) -> None:
        self.lines.append(text)

    def add_figure(self, fig: plt.Figure) -> None:
        self.figures.append(fig)

    def _text_page(self) -> plt.Figure:
        fig, ax = plt.subplots(figsize=A4_PORTRAIT)
        ax.axis("off")
        if self.lines:
            ax.text(0.01, 0.99, "\n".join(self.lines), ha="left", va="top",
                    fontsize=8, family="monospace")
        else:
            ax.text(0.5, 0.5, "No assignments to report.", ha="center",
                    va="center", fontsize=12)
        return fig

    def write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        pages = list(self.figures)
        # Text goes first; an empty document still gets one page.
        if self.lines or not pages:
            pages.insert(0, self._text_page())
        with PdfPages(self.path) as pdf:
            for fig in pages:
                pdf.savefig(fig, bbox_inches="tight")
                plt.close(fig)


_ACTIVE_REPORT: Optional[ReportDocument] = None


def set_active_report(doc: Optional[ReportDocument]) -> None:
    global _ACTIVE_REPORT
    _ACTIVE_REPORT = doc


def get_active_report() -> Optional[ReportDocument]:
    return _ACTIVE_REPORT


def _log_print(*args: object, sep: str = " ") -> None:
    """Print one line and mirror it into the active report."""
    text = sep.join(str(a) for a in args)
    print(text)
    if _ACTIVE_REPORT is not None:
        _ACTIVE_REPORT.add_text(text)


def _fmt_money(x: float | None) -> str:
    if x is None or pd.isna(x):
        return "n/a"
    return f"${float(x):,.2f}"


def render_order_summary(order: OrderBreakdown) -> None:
    _log_print(
        f"Order {order.order_id} ({order.order_type}, {order.retailer}): "
        f"{order.item_count} items, {len(order.tasks)} tasks, "
        f"~{order.total_estimated_time} min"
    )
    for t in order.tasks:
        _log_print(
            f"  {t.id:<24} qty={t.quantity:<5} {t.estimated_time_minutes:>4} min  "
            f"fine={_fmt_money(t.potential_fine)}  [{t.complexity}]"
        )


def render_text_report(
    res: OptimizationResult,
    order: OrderBreakdown | None = None,
    num_print_examples: int = 10,
) -> None:
    """Print the assignment table and exposure totals for one result."""
    if order is not None:
        render_order_summary(order)

    title = f"\nAssignments for order {res.order_id}"
    if res.strategy:
        title += f" (strategy: {res.strategy})"
    _log_print(title + ":")

    df = res.predictions_frame()
    if df.empty:
        _log_print("  (no tasks)")
    else:
        view = df[
            [
                "task_name",
                "assigned_worker",
                "success_rate",
                "expected_fine",
                "potential_fine",
                "risk_level",
            ]
        ].head(num_print_examples)
        view = view.assign(
            success_rate=view["success_rate"].map(lambda v: f"{v:.1f}%"),
            expected_fine=view["expected_fine"].map(_fmt_money),
            potential_fine=view["potential_fine"].map(_fmt_money),
        )
        _log_print(view.to_string(index=False))

        backups = [
            f"  {task_id}: {a.backup.worker.name} ({a.backup.score:.2f})"
            for task_id, a in res.assignments.items()
            if a.backup is not None
        ]
        if backups:
            _log_print("\nBackups:")
            for line in backups[:num_print_examples]:
                _log_print(line)

        warnings = df.dropna(subset=["warning"])
        if not warnings.empty:
            _log_print("\n⚠️ Warnings:")
            for _, row in warnings.iterrows():
                _log_print(f"  {row['task_id']}: {row['warning']}")

    _log_print(f"\nMax possible fines:   {_fmt_money(res.max_possible_fines)}")
    _log_print(f"Total expected fines: {_fmt_money(res.total_expected_fines)}")
    _log_print(
        f"Risk reduction:       {_fmt_money(res.risk_reduction)} "
        f"({res.risk_reduction_percentage}%)"
    )


def render_comparison(frame: pd.DataFrame) -> None:
    """Print the per-strategy table produced by compare_strategies()."""
    if frame.empty:
        _log_print("\nStrategy comparison: (no data)")
        return
    _log_print("\nStrategy comparison:")
    _log_print(frame.to_string(float_format=lambda v: f"{v:,.2f}"))
