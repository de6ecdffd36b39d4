from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Mapping

from .config import VoteConfig, load_config, load_usernames
from .dispatcher import VoteDispatcher
from .errors import StartupError
from .report import SampleCollector, write_report
from .reporter import (
    STATS_INTERVAL_SECONDS_DEFAULT,
    StatsReporter,
    format_stats_line,
    format_summary,
)
from .stats import VoteStats
from .transport import TransactionExecutor
from .vote import VoteContext

LOGGER = logging.getLogger("vote_simulator")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def stats_interval_from_env(env: Mapping[str, str]) -> float:
    interval_str = env.get("VOTE_STATS_INTERVAL_SECONDS", str(STATS_INTERVAL_SECONDS_DEFAULT))
    try:
        interval = float(interval_str)
        if interval <= 0:
            raise ValueError("non-positive stats interval")
    except ValueError:
        print(
            f"invalid VOTE_STATS_INTERVAL_SECONDS value {interval_str!r}; "
            f"defaulting to {STATS_INTERVAL_SECONDS_DEFAULT}",
            file=sys.stderr,
        )
        interval = STATS_INTERVAL_SECONDS_DEFAULT
    return interval


async def simulate(
    config: VoteConfig,
    ctx: VoteContext,
    stats: VoteStats,
    reporter: StatsReporter,
    stop_event: asyncio.Event | None = None,
    max_attempts: int | None = None,
) -> VoteDispatcher:
    executor = TransactionExecutor(
        ctx.address,
        timeout_s=config.timeout_s,
        keepalive=config.keepalive,
    )
    dispatcher = VoteDispatcher(
        ctx,
        stats,
        executor,
        max_connections=config.max_connections,
        rate_ms=config.rate_ms,
    )
    reporter_stop = asyncio.Event()
    reporter_task = asyncio.create_task(reporter.run(reporter_stop), name="vote-stats")
    try:
        await dispatcher.run(stop_event, max_attempts)
        if max_attempts is not None:
            await dispatcher.drain()
    finally:
        reporter_stop.set()
        await reporter_task
        abandoned = dispatcher.abandon()
        if abandoned:
            LOGGER.info("Abandoned %d in-flight attempt(s)", abandoned)
    return dispatcher


def run() -> int:
    env = os.environ
    setup_logging(env.get("VOTE_LOG_LEVEL", "INFO"))

    try:
        config = load_config()
        usernames = load_usernames()
        ctx = VoteContext.from_config(config, usernames)
    except StartupError as exc:
        LOGGER.error("startup failed: %s", exc)
        return 1

    print(format_summary(config, ctx))
    print()

    report_dir_value = env.get("VOTE_REPORT_DIR")
    report_dir = Path(report_dir_value) if report_dir_value else None
    collector = SampleCollector() if report_dir is not None else None

    stats = VoteStats()
    reporter = StatsReporter(
        stats,
        interval_s=stats_interval_from_env(env),
        sample_sink=collector.record if collector is not None else None,
    )

    try:
        asyncio.run(simulate(config, ctx, stats, reporter))
    except KeyboardInterrupt:
        print("\r" + format_stats_line(stats.snapshot()))
        print("stopping simulator", file=sys.stderr)

    if collector is not None and report_dir is not None:
        collector.record(stats.snapshot())
        artefacts = write_report(collector, report_dir)
        for name, path in artefacts.items():
            LOGGER.info("Report %s written to %s", name, path)

    return 0


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
