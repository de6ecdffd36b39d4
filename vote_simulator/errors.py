from __future__ import annotations


class VoteError(Exception):
    """Base class for every error raised by the vote simulator."""


class StartupError(VoteError):
    """Raised when the simulator cannot be prepared; dispatch never starts."""


class ConfigError(StartupError):
    """Raised when the configuration or username source is unreadable or invalid."""


class EncryptionError(VoteError):
    """Raised when a single attempt's payload cannot be encrypted."""


class PayloadError(EncryptionError):
    """Raised when a plaintext payload cannot be encoded within its size limit."""


class TransportError(VoteError):
    """Raised when a single attempt's connection, write or acknowledgment fails."""


__all__ = [
    "VoteError",
    "StartupError",
    "ConfigError",
    "EncryptionError",
    "PayloadError",
    "TransportError",
]
