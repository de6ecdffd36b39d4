"""
Run report for the vote simulator.

Collects the counter samples the console reporter takes while the simulator
runs, turns them into a per-interval throughput table, and renders it as a
CSV file and a chart once the run ends.
"""

from .charts import render_throughput_chart
from .collector import SampleCollector, write_report

__all__ = ["SampleCollector", "render_throughput_chart", "write_report"]
