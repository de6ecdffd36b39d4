from __future__ import annotations

import collections

import pytest

from vote_simulator.errors import ConfigError
from vote_simulator.selector import UsernameSelector

NAMES = ["alpha", "bravo", "charlie", "delta", "echo"]


@pytest.mark.parametrize("start", [0, 1, 3, 4, 7, 2**40 + 3])
def test_window_returns_every_name_once(start):
    selector = UsernameSelector(NAMES, start=start)
    window = [selector.next() for _ in range(len(NAMES))]
    assert sorted(window) == sorted(NAMES)


def test_cycles_in_order_from_start():
    selector = UsernameSelector(NAMES, start=2)
    assert [selector.next() for _ in range(6)] == [
        "charlie",
        "delta",
        "echo",
        "alpha",
        "bravo",
        "charlie",
    ]


def test_single_name_always_returned():
    selector = UsernameSelector(["solo"])
    assert {selector.next() for _ in range(10)} == {"solo"}


def test_long_run_is_evenly_distributed():
    selector = UsernameSelector(NAMES)
    counts = collections.Counter(selector.next() for _ in range(len(NAMES) * 20))
    assert set(counts.values()) == {20}


def test_empty_list_rejected_at_construction():
    with pytest.raises(ConfigError):
        UsernameSelector([])


def test_source_list_mutation_does_not_leak_in():
    names = list(NAMES)
    selector = UsernameSelector(names)
    names.clear()
    assert len(selector) == len(NAMES)
    assert selector.usernames == tuple(NAMES)
