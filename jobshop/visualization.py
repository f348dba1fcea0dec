import logging
import os
from pathlib import Path
from typing import List, Optional

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402

from jobshop.schedule import Schedule  # noqa: E402

logger = logging.getLogger("jssp")


def _ensure_dir(path: str):
    if path:
        os.makedirs(path, exist_ok=True)


def save_gantt_chart(
    schedule: Schedule,
    filepath: str | Path,
    title: Optional[str] = None,
    show_legend: Optional[bool] = None,
) -> str:
    """Create and save a Gantt chart (one row per machine) for ``schedule``.

    - Uses constrained_layout to reduce layout warnings.
    - Disables legend automatically for many jobs unless forced.
    - Adaptive figure size based on number of machines and jobs.
    """
    instance = schedule.instance
    m = instance.machines_number
    n = instance.jobs_number
    cmax = schedule.makespan()

    base_w, base_h = 10, 0.5 * m + 2
    fig, ax = plt.subplots(
        figsize=(min(base_w + n * 0.05, 18), min(base_h, 16)),
        constrained_layout=True,
    )
    cmap = plt.get_cmap("tab20")
    colors = [cmap(i % 20) for i in range(n)]
    for row in schedule.to_rows():
        ax.barh(
            row.machine,
            row.processing_time,
            left=row.start,
            height=0.8,
            color=colors[row.job],
            alpha=0.85,
            edgecolor="black",
            linewidth=0.6,
        )
    ax.set_xlabel("Time", fontsize=12)
    ax.set_ylabel("Machine", fontsize=12)
    ax.set_title(title or f"Gantt Chart - Cmax = {cmax}", fontsize=14, fontweight="bold")
    ax.set_yticks(range(m))
    ax.set_yticklabels([f"M{i}" for i in range(m)])
    ax.grid(True, alpha=0.25, axis="x", linestyle="--", linewidth=0.7)
    ax.set_ylim(-0.5, m - 0.5)

    if show_legend is None:
        show_legend = n <= 40
    if show_legend:
        legend_elements = [
            plt.Rectangle(
                (0, 0), 1, 1, facecolor=colors[i], alpha=0.85, edgecolor="black", label=f"Job {i}"
            )
            for i in range(n)
        ]
        ax.legend(
            handles=legend_elements,
            bbox_to_anchor=(1.02, 1),
            loc="upper left",
            borderaxespad=0.0,
            fontsize=8,
            frameon=False,
            ncol=1 if n <= 25 else 2,
        )

    filepath = str(filepath)
    _ensure_dir(os.path.dirname(filepath))
    fig.savefig(filepath, dpi=180)
    plt.close(fig)
    logger.info("Gantt chart saved as: %s", filepath)
    return filepath


def save_convergence_plot(history: List[int], filepath: str | Path, label: str = "best") -> str:
    """Plot best-so-far makespan per iteration and save it."""
    fig, ax = plt.subplots(figsize=(10, 6), constrained_layout=True)
    ax.plot(
        range(len(history)),
        history,
        label=label,
        linewidth=2,
        marker="o",
        markersize=3,
        markerfacecolor="white",
        markeredgewidth=1.0,
    )
    ax.set_xlabel("Iteration", fontsize=12)
    ax.set_ylabel("Cmax", fontsize=12)
    ax.set_title("Convergence", fontsize=14, fontweight="bold")
    ax.grid(True, alpha=0.25, linestyle="--", linewidth=0.7)
    ax.legend(loc="upper right", frameon=False)

    filepath = str(filepath)
    _ensure_dir(os.path.dirname(filepath))
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    logger.info("Convergence plot saved as: %s", filepath)
    return filepath
