from __future__ import annotations

import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

LOGGER = logging.getLogger("vote_simulator.report.charts")

sns.set_style("whitegrid")
plt.rcParams["figure.dpi"] = 100
plt.rcParams["savefig.dpi"] = 150
plt.rcParams["axes.labelsize"] = 11
plt.rcParams["axes.titlesize"] = 13
plt.rcParams["legend.fontsize"] = 9

SERIES_COLORS = {
    "votes_per_second": "#2E86AB",
    "errors_per_second": "#C73E1D",
    "cumulative_votes_per_second": "#6A994E",
}

SERIES_LABELS = {
    "votes_per_second": "Votes/s (interval)",
    "errors_per_second": "Errors/s (interval)",
    "cumulative_votes_per_second": "Votes/s (average)",
}


def render_throughput_chart(
    samples: pd.DataFrame,
    chart_path: Path,
    title: str = "Vote Throughput Over Time",
) -> Path:
    """Render interval and average throughput against elapsed time."""
    long_df = samples.melt(
        id_vars=["elapsed_s"],
        value_vars=list(SERIES_LABELS),
        var_name="series",
        value_name="rate",
    )
    long_df["series"] = long_df["series"].map(SERIES_LABELS)

    fig, ax = plt.subplots(figsize=(10, 6))
    sns.lineplot(
        data=long_df,
        x="elapsed_s",
        y="rate",
        hue="series",
        palette={SERIES_LABELS[key]: color for key, color in SERIES_COLORS.items()},
        linewidth=2,
        ax=ax,
    )
    ax.set_xlabel("Elapsed (s)", fontweight="semibold")
    ax.set_ylabel("Rate (per second)", fontweight="semibold")
    ax.set_title(title, fontweight="bold", pad=15)
    ax.grid(True, alpha=0.3, linestyle="--")
    ax.legend(title=None, frameon=True)

    plt.tight_layout()
    fig.savefig(chart_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    LOGGER.info("Rendered chart %s", chart_path)
    return chart_path


__all__ = ["render_throughput_chart"]
