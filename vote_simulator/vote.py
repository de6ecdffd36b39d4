from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterable

from .config import VoteConfig
from .crypto import Encryptor
from .errors import EncryptionError, TransportError
from .payload import build_payload
from .selector import UsernameSelector
from .stats import VoteStats
from .transport import ResolvedAddress, TransactionExecutor, resolve_address

LOGGER = logging.getLogger("vote_simulator.vote")


class AttemptOutcome(enum.Enum):
    SUCCESS = "success"
    ENCRYPTION_FAILED = "encryption_failed"
    TRANSPORT_FAILED = "transport_failed"

    @property
    def ok(self) -> bool:
        return self is AttemptOutcome.SUCCESS


@dataclass(frozen=True)
class VoteContext:
    """Everything an attempt needs, built once at startup and shared read-only."""

    encryptor: Encryptor
    address: ResolvedAddress
    site: str
    selector: UsernameSelector

    @classmethod
    def from_config(cls, config: VoteConfig, usernames: Iterable[str]) -> "VoteContext":
        selector = UsernameSelector(usernames)
        encryptor = Encryptor.from_base64(config.public_key)
        address = resolve_address(config.host, config.port)
        LOGGER.info(
            "Resolved %s:%d to %s (%d-bit key, %d usernames)",
            config.host,
            config.port,
            address,
            encryptor.modulus_bytes * 8,
            len(selector),
        )
        return cls(
            encryptor=encryptor,
            address=address,
            site=config.site_name,
            selector=selector,
        )

    @property
    def usernames(self) -> tuple[str, ...]:
        return self.selector.usernames


async def process_vote(
    ctx: VoteContext,
    stats: VoteStats,
    executor: TransactionExecutor,
) -> AttemptOutcome:
    """Run one attempt end to end and record exactly one outcome."""
    username = ctx.selector.next()

    try:
        ciphertext = ctx.encryptor.encrypt(build_payload(ctx.site, username))
    except EncryptionError as exc:
        LOGGER.debug("encryption failed for %r: %s", username, exc)
        stats.record_failure()
        return AttemptOutcome.ENCRYPTION_FAILED

    try:
        await executor.send(ciphertext)
    except TransportError as exc:
        LOGGER.debug("transport failed for %r: %s", username, exc)
        stats.record_failure()
        return AttemptOutcome.TRANSPORT_FAILED

    stats.record_success()
    return AttemptOutcome.SUCCESS


__all__ = ["AttemptOutcome", "VoteContext", "process_vote"]
