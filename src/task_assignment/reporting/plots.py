from __future__ import annotations

import re
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from task_assignment.result_types import OptimizationResult

from .text_report import get_active_report

RISK_COLORS = {"High": "#EF4444", "Medium": "#F59E0B", "Low": "#34D399"}


def _file_stem(text: str) -> str:
    """Make an order id usable as a single path component."""
    return re.sub(r"[^\w.-]", "_", text)


def _save_and_show(fig: plt.Figure, filename: str, out_dir: Path = Path("outputs")) -> None:
    """Persist the plot under out_dir and show it."""
    out_dir.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_dir / filename, dpi=fig.dpi, bbox_inches="tight")
    plt.show()


def _attach(fig: plt.Figure) -> None:
    report = get_active_report()
    if report is not None:
        report.add_figure(fig)


def show_expected_fines(
    res: OptimizationResult,
    out_dir: Path = Path("outputs"),
    enable_plot: bool = True,
) -> None:
    """Bar chart of potential vs expected fine per task, coloured by risk level."""
    if not enable_plot:
        return
    df = res.predictions_frame()
    if df.empty:
        return

    x = np.arange(len(df))
    width = 0.4
    fig, ax = plt.subplots(figsize=(7.5, 4), dpi=150)
    ax.set_title(f"Fine exposure by task, order {res.order_id}", pad=20)
    ax.bar(
        x - width / 2,
        df["potential_fine"],
        width=width,
        color="#CBD5E1",
        label="Potential fine",
        edgecolor="none",
    )
    ax.bar(
        x + width / 2,
        df["expected_fine"],
        width=width,
        color=[RISK_COLORS.get(r, "#94a3b8") for r in df["risk_level"]],
        label="Expected fine",
        edgecolor="none",
    )
    for xi, worker in zip(x, df["assigned_worker"]):
        ax.annotate(
            worker,
            (xi + width / 2, 0),
            xytext=(0, 3),
            textcoords="offset points",
            rotation=90,
            ha="center",
            va="bottom",
            fontsize=6,
        )

    ax.set_xticks(x, df["task_name"], rotation=30, ha="right")
    ax.set_ylabel("Fine ($)")
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.legend(loc="upper right", frameon=False)
    fig.tight_layout()
    _save_and_show(fig, f"expected_fines_{_file_stem(res.order_id)}.png", out_dir)
    _attach(fig)


def show_strategy_comparison(
    frame: pd.DataFrame,
    out_dir: Path = Path("outputs"),
    enable_plot: bool = True,
) -> None:
    """Horizontal bars of total expected fines per simulated strategy."""
    if not enable_plot or frame.empty:
        return

    fig, ax = plt.subplots(figsize=(6, 3), dpi=150)
    ax.set_title("Expected fines by assignment strategy", pad=15)
    labels = [str(s) for s in frame.index]
    ax.barh(labels, frame["total_expected_fines"], color="tab:blue", alpha=0.8)
    max_possible = float(frame["max_possible_fines"].max())
    ax.axvline(
        max_possible, color="tab:red", linestyle="--", linewidth=1, label="Max possible"
    )
    for y, (total, pct) in enumerate(
        zip(frame["total_expected_fines"], frame["risk_reduction_percentage"])
    ):
        ax.text(total, y, f"  {pct}% reduced", va="center", fontsize=7)
    ax.set_xlabel("Expected fines ($)")
    ax.set_xlim(0, max_possible * 1.15 if max_possible > 0 else 1)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    ax.legend(loc="lower right", frameon=False)
    fig.tight_layout()
    _save_and_show(fig, "strategy_comparison.png", out_dir)
    _attach(fig)
