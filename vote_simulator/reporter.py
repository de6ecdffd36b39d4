from __future__ import annotations

import asyncio
import sys
from typing import Callable, TextIO

from .config import VoteConfig
from .stats import StatsSnapshot, VoteStats
from .vote import VoteContext

STATS_INTERVAL_SECONDS_DEFAULT = 1.0


def format_summary(config: VoteConfig, ctx: VoteContext) -> str:
    lines = [
        f"Target: {ctx.address}:{ctx.site}",
        f"{config.describe_mode()} | {config.max_connections} connections | "
        f"{len(ctx.usernames)} usernames",
        "",
        "Press Ctrl+C to stop",
    ]
    return "\n".join(lines)


def format_stats_line(snapshot: StatsSnapshot) -> str:
    return (
        f"Total: {snapshot.successes} | Errors: {snapshot.failures} | "
        f"Rate: {snapshot.votes_per_second:.0f} v/s ({snapshot.votes_per_minute:.0f} v/m)"
    )


class StatsReporter:
    """Rewrites a single stdout line with the latest counters once per interval."""

    def __init__(
        self,
        stats: VoteStats,
        interval_s: float = STATS_INTERVAL_SECONDS_DEFAULT,
        stream: TextIO | None = None,
        sample_sink: Callable[[StatsSnapshot], None] | None = None,
    ) -> None:
        self._stats = stats
        self._interval_s = interval_s
        self._stream = stream if stream is not None else sys.stdout
        self._sample_sink = sample_sink

    def report_once(self) -> StatsSnapshot:
        snapshot = self._stats.snapshot()
        self._stream.write("\r" + format_stats_line(snapshot))
        self._stream.flush()
        if self._sample_sink is not None:
            self._sample_sink(snapshot)
        return snapshot

    async def run(self, stop_event: asyncio.Event | None = None) -> None:
        while True:
            if stop_event is None:
                await asyncio.sleep(self._interval_s)
            else:
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self._interval_s)
                except asyncio.TimeoutError:
                    pass
                else:
                    return
            self.report_once()


__all__ = [
    "STATS_INTERVAL_SECONDS_DEFAULT",
    "format_summary",
    "format_stats_line",
    "StatsReporter",
]
