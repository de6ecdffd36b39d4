from __future__ import annotations

import random
import re

import pytest

from vote_simulator.errors import EncryptionError, PayloadError
from vote_simulator.payload import MAX_PAYLOAD_BYTES, build_payload, next_nonce


def test_fixed_nonce_payload_is_exact():
    assert (
        build_payload("Example", "Notch", nonce=0xABCD)
        == b"VOTE\nExample-abcd\nNotch\n127.0.0.1\n1234567890\n"
    )


def test_random_nonce_fills_header_line():
    payload = build_payload("Example", "Notch").decode("utf-8")
    lines = payload.split("\n")
    assert len(lines) == 6 and lines[-1] == ""
    assert lines[0] == "VOTE"
    assert re.fullmatch(r"Example-[0-9a-f]{1,8}", lines[1])
    assert lines[2:5] == ["Notch", "127.0.0.1", "1234567890"]


def test_nonce_is_32_bit():
    rng = random.Random(1234)
    for _ in range(200):
        assert 0 <= next_nonce(rng) < 2**32


def test_max_nonce_renders_eight_hex_digits():
    payload = build_payload("s", "u", nonce=0xFFFFFFFF)
    assert b"s-ffffffff\n" in payload


def test_oversized_payload_rejected():
    with pytest.raises(PayloadError) as excinfo:
        build_payload("x" * MAX_PAYLOAD_BYTES, "Notch", nonce=1)
    assert isinstance(excinfo.value, EncryptionError)


def test_payload_at_limit_is_accepted():
    fixed = len(build_payload("", "u", nonce=0))
    payload = build_payload("x" * (MAX_PAYLOAD_BYTES - fixed), "u", nonce=0)
    assert len(payload) == MAX_PAYLOAD_BYTES
