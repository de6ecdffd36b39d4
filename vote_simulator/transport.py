from __future__ import annotations

import asyncio
import logging
import socket
import struct
from dataclasses import dataclass
from typing import Any

from .errors import StartupError, TransportError

LOGGER = logging.getLogger("vote_simulator.transport")


@dataclass(frozen=True)
class ResolvedAddress:
    family: int
    sockaddr: tuple[Any, ...]

    @property
    def host(self) -> str:
        return self.sockaddr[0]

    @property
    def port(self) -> int:
        return self.sockaddr[1]

    def __str__(self) -> str:
        if self.family == socket.AF_INET6:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def resolve_address(host: str, port: int) -> ResolvedAddress:
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as exc:
        raise StartupError(f"unable to resolve {host}:{port}: {exc}") from exc
    if not infos:
        raise StartupError(f"no addresses found for {host}:{port}")

    distinct = {info[4] for info in infos}
    if len(distinct) > 1:
        LOGGER.warning(
            "%s:%d resolved to %d addresses, using the first one",
            host,
            port,
            len(distinct),
        )
    family, _, _, _, sockaddr = infos[0]
    return ResolvedAddress(family=family, sockaddr=tuple(sockaddr))


def configure_socket(sock: socket.socket, keepalive: bool = False) -> None:
    # Zero linger aborts on close, so closed sockets never sit in TIME_WAIT
    # and exhaust ephemeral ports under heavy churn.
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_LINGER, struct.pack("ii", 1, 0))
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1 if keepalive else 0)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


async def _wait_readable(loop: asyncio.AbstractEventLoop, sock: socket.socket) -> None:
    ready = loop.create_future()

    def on_readable() -> None:
        if not ready.done():
            ready.set_result(None)

    fd = sock.fileno()
    loop.add_reader(fd, on_readable)
    try:
        await ready
    finally:
        loop.remove_reader(fd)


async def peek_byte(loop: asyncio.AbstractEventLoop, sock: socket.socket) -> bytes:
    """Wait until the peer has sent something (or closed) without consuming it."""
    while True:
        try:
            return sock.recv(1, socket.MSG_PEEK)
        except (BlockingIOError, InterruptedError):
            await _wait_readable(loop, sock)


class TransactionExecutor:
    """Delivers one ciphertext block per fresh TCP connection."""

    def __init__(
        self,
        address: ResolvedAddress,
        timeout_s: float | None = None,
        keepalive: bool = False,
    ) -> None:
        self._address = address
        self._timeout_s = timeout_s
        self._keepalive = keepalive

    @property
    def address(self) -> ResolvedAddress:
        return self._address

    async def send(self, ciphertext: bytes) -> None:
        if self._timeout_s is None:
            await self._exchange(ciphertext)
            return
        try:
            await asyncio.wait_for(self._exchange(ciphertext), self._timeout_s)
        except asyncio.TimeoutError as exc:
            raise TransportError(
                f"{self._address} did not respond within {self._timeout_s:.3f}s"
            ) from exc

    async def _exchange(self, ciphertext: bytes) -> None:
        # Socket errors, ETIMEDOUT included, become TransportError here so the
        # wait_for handler above only ever sees its own deadline.
        try:
            await self._transact(ciphertext)
        except OSError as exc:
            raise TransportError(f"{self._address}: {exc}") from exc

    async def _transact(self, ciphertext: bytes) -> None:
        loop = asyncio.get_running_loop()
        sock = socket.socket(self._address.family, socket.SOCK_STREAM)
        try:
            configure_socket(sock, self._keepalive)
            sock.setblocking(False)
            await loop.sock_connect(sock, self._address.sockaddr)
            await loop.sock_sendall(sock, ciphertext)
            await peek_byte(loop, sock)
        finally:
            sock.close()


__all__ = [
    "ResolvedAddress",
    "resolve_address",
    "configure_socket",
    "peek_byte",
    "TransactionExecutor",
]
