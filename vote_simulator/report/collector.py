from __future__ import annotations

import logging
import threading
from pathlib import Path

import pandas as pd

from ..stats import StatsSnapshot
from .charts import render_throughput_chart

LOGGER = logging.getLogger("vote_simulator.report")

SAMPLES_FILENAME = "vote_samples.csv"
CHART_FILENAME = "vote_throughput.png"

SAMPLE_COLUMNS = [
    "elapsed_s",
    "successes",
    "failures",
    "interval_s",
    "interval_successes",
    "interval_failures",
    "votes_per_second",
    "errors_per_second",
    "cumulative_votes_per_second",
]


class SampleCollector:
    """Accumulates counter snapshots taken by the console reporter."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._samples: list[StatsSnapshot] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)

    def record(self, snapshot: StatsSnapshot) -> None:
        with self._lock:
            self._samples.append(snapshot)

    def build_dataframe(self) -> pd.DataFrame:
        with self._lock:
            rows = [
                {
                    "elapsed_s": sample.elapsed_s,
                    "successes": sample.successes,
                    "failures": sample.failures,
                }
                for sample in self._samples
            ]

        if not rows:
            return pd.DataFrame(columns=SAMPLE_COLUMNS)

        df = pd.DataFrame(rows)
        # the first interval is measured from the start of the run
        df["interval_s"] = df["elapsed_s"].diff().fillna(df["elapsed_s"])
        df["interval_successes"] = df["successes"].diff().fillna(df["successes"]).astype(int)
        df["interval_failures"] = df["failures"].diff().fillna(df["failures"]).astype(int)

        interval = df["interval_s"].where(df["interval_s"] > 0)
        df["votes_per_second"] = (df["interval_successes"] / interval).fillna(0.0)
        df["errors_per_second"] = (df["interval_failures"] / interval).fillna(0.0)
        elapsed = df["elapsed_s"].where(df["elapsed_s"] > 0)
        df["cumulative_votes_per_second"] = (df["successes"] / elapsed).fillna(0.0)
        return df[SAMPLE_COLUMNS]


def write_report(collector: SampleCollector, output_dir: Path) -> dict[str, Path]:
    """Write the sample table and its chart; return the artefact paths."""
    output_dir.mkdir(parents=True, exist_ok=True)
    df = collector.build_dataframe()

    samples_path = output_dir / SAMPLES_FILENAME
    df.to_csv(samples_path, index=False)
    LOGGER.info("Saved %d sample(s) to %s", len(df), samples_path)

    artefacts = {"samples": samples_path}
    if df.empty:
        LOGGER.warning("No samples collected; skipping throughput chart")
        return artefacts

    artefacts["chart"] = render_throughput_chart(df, output_dir / CHART_FILENAME)
    return artefacts


__all__ = [
    "SAMPLES_FILENAME",
    "CHART_FILENAME",
    "SAMPLE_COLUMNS",
    "SampleCollector",
    "write_report",
]
