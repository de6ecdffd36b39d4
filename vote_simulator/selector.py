from __future__ import annotations

import itertools
from typing import Iterable

from .errors import ConfigError


class UsernameSelector:
    """Round-robin cursor over a fixed, non-empty sequence of usernames.

    The cursor is an ``itertools.count`` shared by every attempt; over any
    ``len(usernames)`` consecutive calls each name is returned exactly once.
    """

    def __init__(self, usernames: Iterable[str], start: int = 0) -> None:
        self._usernames: tuple[str, ...] = tuple(usernames)
        if not self._usernames:
            raise ConfigError("username list must contain at least one entry")
        self._cursor = itertools.count(start=start)

    def __len__(self) -> int:
        return len(self._usernames)

    @property
    def usernames(self) -> tuple[str, ...]:
        return self._usernames

    def next(self) -> str:
        index = next(self._cursor) % len(self._usernames)
        return self._usernames[index]


__all__ = ["UsernameSelector"]
