from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError

CONFIG_FILENAME = "config.json"
USERNAMES_FILENAME = "scanned_players.json"

TIMEOUT_MS_DEFAULT = 10_000


@dataclass(frozen=True)
class VoteConfig:
    """Target listener and throughput settings read from ``config.json``."""

    host: str
    port: int
    public_key: str
    site_name: str
    rate_ms: int
    max_connections: int
    timeout_ms: int = TIMEOUT_MS_DEFAULT
    keepalive: bool = False

    @property
    def rate_limited(self) -> bool:
        return self.rate_ms > 0

    @property
    def timeout_s(self) -> float | None:
        if self.timeout_ms <= 0:
            return None
        return self.timeout_ms / 1000.0

    def describe_mode(self) -> str:
        if not self.rate_limited:
            return "Unlimited"
        return f"Rate Limited ({self.rate_ms}ms interval)"


def default_config_path() -> Path:
    override = os.environ.get("VOTE_CONFIG_PATH")
    if override:
        return Path(override)
    return Path.cwd() / CONFIG_FILENAME


def default_usernames_path() -> Path:
    override = os.environ.get("VOTE_USERNAMES_PATH")
    if override:
        return Path(override)
    return Path.cwd() / USERNAMES_FILENAME


def _read_json(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"unable to read {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in {path}: {exc}") from exc


def _require(raw: dict[str, Any], key: str, kind: type) -> Any:
    if key not in raw:
        raise ConfigError(f"missing config key {key!r}")
    value = raw[key]
    # bool is a subclass of int; never accept it where a number is expected
    if kind is int and isinstance(value, bool):
        raise ConfigError(f"config key {key!r} must be an integer, got {value!r}")
    if not isinstance(value, kind):
        raise ConfigError(
            f"config key {key!r} must be of type {kind.__name__}, got {value!r}"
        )
    return value


def parse_config(raw: Any) -> VoteConfig:
    if not isinstance(raw, dict):
        raise ConfigError("config root must be a JSON object")

    host = _require(raw, "votifier_host", str).strip()
    port = _require(raw, "votifier_port", int)
    public_key = _require(raw, "votifier_key", str).strip()
    site_name = _require(raw, "site_name", str)
    rate_ms = _require(raw, "rate", int)
    max_connections = _require(raw, "max_connections", int)

    timeout_ms = TIMEOUT_MS_DEFAULT
    if "timeout_ms" in raw:
        timeout_ms = _require(raw, "timeout_ms", int)
    keepalive = False
    if "keepalive" in raw:
        keepalive = _require(raw, "keepalive", bool)

    if not host:
        raise ConfigError("votifier_host must not be empty")
    if not 0 <= port <= 65535:
        raise ConfigError(f"votifier_port out of range: {port}")
    if not public_key:
        raise ConfigError("votifier_key must not be empty")
    if not site_name:
        raise ConfigError("site_name must not be empty")
    if rate_ms < 0:
        raise ConfigError(f"rate must be >= 0, got {rate_ms}")
    if max_connections < 1:
        raise ConfigError(f"max_connections must be >= 1, got {max_connections}")
    if timeout_ms < 0:
        raise ConfigError(f"timeout_ms must be >= 0, got {timeout_ms}")

    return VoteConfig(
        host=host,
        port=port,
        public_key=public_key,
        site_name=site_name,
        rate_ms=rate_ms,
        max_connections=max_connections,
        timeout_ms=timeout_ms,
        keepalive=keepalive,
    )


def parse_usernames(raw: Any) -> list[str]:
    if not isinstance(raw, dict) or "players" not in raw:
        raise ConfigError("username source must be an object with a 'players' list")
    players = raw["players"]
    if not isinstance(players, list):
        raise ConfigError("'players' must be a list")
    if not players:
        raise ConfigError("username list is empty")
    for index, name in enumerate(players):
        if not isinstance(name, str) or not name:
            raise ConfigError(f"player #{index} is not a non-empty string: {name!r}")
    return list(players)


def load_config(path: Path | None = None) -> VoteConfig:
    return parse_config(_read_json(path or default_config_path()))


def load_usernames(path: Path | None = None) -> list[str]:
    return parse_usernames(_read_json(path or default_usernames_path()))


__all__ = [
    "CONFIG_FILENAME",
    "USERNAMES_FILENAME",
    "TIMEOUT_MS_DEFAULT",
    "VoteConfig",
    "default_config_path",
    "default_usernames_path",
    "parse_config",
    "parse_usernames",
    "load_config",
    "load_usernames",
]
