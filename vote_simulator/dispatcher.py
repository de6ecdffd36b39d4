from __future__ import annotations

import asyncio
import collections
import logging

from .stats import VoteStats
from .transport import TransactionExecutor
from .vote import AttemptOutcome, VoteContext, process_vote

LOGGER = logging.getLogger("vote_simulator.dispatcher")


async def _sleep_until(
    loop: asyncio.AbstractEventLoop,
    deadline: float,
    stop_event: asyncio.Event | None,
) -> bool:
    """Sleep until ``deadline`` on the loop clock; return True if stopped first."""
    delay = deadline - loop.time()
    if stop_event is None:
        if delay > 0:
            await asyncio.sleep(delay)
        return False
    if delay <= 0:
        return stop_event.is_set()
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=delay)
    except asyncio.TimeoutError:
        return False
    return True


class VoteDispatcher:
    """Issues vote attempts with at most ``max_connections`` in flight.

    With ``rate_ms == 0`` attempts are spawned back to back whenever a slot
    is free. Otherwise one attempt is spawned per tick of a fixed
    ``rate_ms`` interval; ticks missed while waiting for a slot collapse
    into a single catch-up tick.
    """

    def __init__(
        self,
        ctx: VoteContext,
        stats: VoteStats,
        executor: TransactionExecutor,
        max_connections: int,
        rate_ms: int = 0,
    ) -> None:
        if max_connections < 1:
            raise ValueError("max_connections must be >= 1")
        if rate_ms < 0:
            raise ValueError("rate_ms must be >= 0")
        self._ctx = ctx
        self._stats = stats
        self._executor = executor
        self._max_connections = max_connections
        self._rate_ms = rate_ms
        self._slots = asyncio.Semaphore(max_connections)
        self._tasks: set[asyncio.Task[None]] = set()
        self._in_flight = 0
        self.peak_in_flight = 0
        self.spawned = 0
        self.outcomes: collections.Counter[AttemptOutcome] = collections.Counter()

    @property
    def max_connections(self) -> int:
        return self._max_connections

    @property
    def rate_ms(self) -> int:
        return self._rate_ms

    @property
    def in_flight(self) -> int:
        return self._in_flight

    async def run(
        self,
        stop_event: asyncio.Event | None = None,
        max_attempts: int | None = None,
    ) -> int:
        """Dispatch until ``stop_event`` is set or ``max_attempts`` were spawned."""
        LOGGER.info(
            "Dispatching with %d slot(s), %s",
            self._max_connections,
            f"{self._rate_ms}ms interval" if self._rate_ms else "no rate limit",
        )
        if self._rate_ms > 0:
            await self._run_rate_limited(stop_event, max_attempts)
        else:
            await self._run_unbounded(stop_event, max_attempts)
        return self.spawned

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def abandon(self) -> int:
        """Cancel every in-flight attempt without waiting; return how many."""
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        return len(pending)

    def _finished(self, stop_event: asyncio.Event | None, max_attempts: int | None) -> bool:
        if stop_event is not None and stop_event.is_set():
            return True
        return max_attempts is not None and self.spawned >= max_attempts

    async def _acquire_and_spawn(self, stop_event: asyncio.Event | None) -> bool:
        await self._slots.acquire()
        if stop_event is not None and stop_event.is_set():
            self._slots.release()
            return False
        self._spawn()
        return True

    async def _run_unbounded(
        self,
        stop_event: asyncio.Event | None,
        max_attempts: int | None,
    ) -> None:
        while not self._finished(stop_event, max_attempts):
            if not await self._acquire_and_spawn(stop_event):
                return
            # A free slot never suspends acquire(); yield so attempts can progress.
            await asyncio.sleep(0)

    async def _run_rate_limited(
        self,
        stop_event: asyncio.Event | None,
        max_attempts: int | None,
    ) -> None:
        loop = asyncio.get_running_loop()
        interval = self._rate_ms / 1000.0
        next_tick = loop.time()
        while not self._finished(stop_event, max_attempts):
            if await _sleep_until(loop, next_tick, stop_event):
                return
            if not await self._acquire_and_spawn(stop_event):
                return
            next_tick += interval
            now = loop.time()
            if next_tick < now:
                # fire once now for all missed ticks, then resume the cadence
                next_tick = now

    def _spawn(self) -> None:
        self.spawned += 1
        self._in_flight += 1
        if self._in_flight > self.peak_in_flight:
            self.peak_in_flight = self._in_flight
        task = asyncio.create_task(self._attempt(), name=f"vote-attempt-{self.spawned}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _attempt(self) -> None:
        try:
            outcome = await process_vote(self._ctx, self._stats, self._executor)
            self.outcomes[outcome] += 1
        except Exception:  # noqa: BLE001
            LOGGER.exception("vote attempt failed unexpectedly")
            self._stats.record_failure()
        finally:
            self._in_flight -= 1
            self._slots.release()


__all__ = ["VoteDispatcher"]
