from __future__ import annotations

import random

from .errors import PayloadError

MAX_PAYLOAD_BYTES = 256

# The listener never checks these, and the client cannot know its public values.
PLACEHOLDER_ADDRESS = "127.0.0.1"
PLACEHOLDER_TIMESTAMP = "1234567890"

_NONCE_RNG = random.Random()


def next_nonce(rng: random.Random | None = None) -> int:
    """Return a 32-bit value used only to vary the header line between attempts."""
    return (rng or _NONCE_RNG).getrandbits(32)


def build_payload(site: str, username: str, nonce: int | None = None) -> bytes:
    if nonce is None:
        nonce = next_nonce()
    text = (
        f"VOTE\n"
        f"{site}-{nonce:x}\n"
        f"{username}\n"
        f"{PLACEHOLDER_ADDRESS}\n"
        f"{PLACEHOLDER_TIMESTAMP}\n"
    )
    try:
        payload = text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise PayloadError(f"unable to encode payload for {username!r}") from exc
    if len(payload) > MAX_PAYLOAD_BYTES:
        raise PayloadError(
            f"payload is {len(payload)} bytes, limit is {MAX_PAYLOAD_BYTES}"
        )
    return payload


__all__ = [
    "MAX_PAYLOAD_BYTES",
    "PLACEHOLDER_ADDRESS",
    "PLACEHOLDER_TIMESTAMP",
    "next_nonce",
    "build_payload",
]
