from __future__ import annotations

import time
from typing import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class StatsSnapshot:
    successes: int
    failures: int
    elapsed_s: float

    @property
    def total(self) -> int:
        return self.successes + self.failures

    @property
    def votes_per_second(self) -> float:
        if self.elapsed_s <= 0:
            return 0.0
        return self.successes / self.elapsed_s

    @property
    def votes_per_minute(self) -> float:
        return self.votes_per_second * 60.0


class VoteStats:
    """Success and failure counters shared by every attempt.

    Counters are only incremented from tasks on the event loop thread, so a
    plain ``+= 1`` cannot interleave with another update. Readers get an
    unsynchronised snapshot.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started_at = clock()
        self._successes = 0
        self._failures = 0

    @property
    def successes(self) -> int:
        return self._successes

    @property
    def failures(self) -> int:
        return self._failures

    @property
    def started_at(self) -> float:
        return self._started_at

    def record_success(self) -> None:
        self._successes += 1

    def record_failure(self) -> None:
        self._failures += 1

    def snapshot(self) -> StatsSnapshot:
        return StatsSnapshot(
            successes=self._successes,
            failures=self._failures,
            elapsed_s=max(self._clock() - self._started_at, 0.0),
        )


__all__ = ["StatsSnapshot", "VoteStats"]
