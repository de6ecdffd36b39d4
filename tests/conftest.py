from __future__ import annotations

import base64
import socket

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from vote_simulator.config import VoteConfig
from vote_simulator.crypto import Encryptor
from vote_simulator.selector import UsernameSelector
from vote_simulator.transport import ResolvedAddress
from vote_simulator.vote import VoteContext

USERNAMES = ["Notch", "jeb_", "Dinnerbone", "Grumm"]


@pytest.fixture(scope="session")
def private_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def public_key_body(private_key) -> str:
    der = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(der).decode("ascii")


@pytest.fixture
def encryptor(public_key_body) -> Encryptor:
    return Encryptor.from_base64(public_key_body)


@pytest.fixture
def vote_config(public_key_body) -> VoteConfig:
    return VoteConfig(
        host="127.0.0.1",
        port=8192,
        public_key=public_key_body,
        site_name="Example",
        rate_ms=0,
        max_connections=4,
    )


@pytest.fixture
def make_context(encryptor):
    def factory(site: str = "Example", usernames=None, port: int = 8192) -> VoteContext:
        return VoteContext(
            encryptor=encryptor,
            address=ResolvedAddress(socket.AF_INET, ("127.0.0.1", port)),
            site=site,
            selector=UsernameSelector(usernames or USERNAMES),
        )

    return factory


@pytest.fixture
def closed_port() -> int:
    """A loopback port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
