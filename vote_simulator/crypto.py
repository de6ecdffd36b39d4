from __future__ import annotations

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from .errors import EncryptionError, StartupError

PKCS1_V15_OVERHEAD = 11
PEM_LINE_LENGTH = 64


def format_pem(body: str) -> str:
    """Wrap a bare base64 public key body in ``PUBLIC KEY`` armor."""
    body = "".join(body.split())
    lines = ["-----BEGIN PUBLIC KEY-----"]
    lines.extend(
        body[offset : offset + PEM_LINE_LENGTH]
        for offset in range(0, len(body), PEM_LINE_LENGTH)
    )
    lines.append("-----END PUBLIC KEY-----")
    return "\n".join(lines) + "\n"


class Encryptor:
    """PKCS#1 v1.5 encryption with a single RSA public key.

    Padding bytes come from the operating system's CSPRNG through
    ``cryptography``; the key is parsed once and never changes.
    """

    def __init__(self, public_key: rsa.RSAPublicKey) -> None:
        self._public_key = public_key
        self._padding = padding.PKCS1v15()

    @classmethod
    def from_pem(cls, pem: bytes | str) -> "Encryptor":
        if isinstance(pem, str):
            pem = pem.encode("ascii", errors="replace")
        try:
            key = serialization.load_pem_public_key(pem)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise StartupError(f"unable to parse public key: {exc}") from exc
        if not isinstance(key, rsa.RSAPublicKey):
            raise StartupError(
                f"public key must be RSA, got {type(key).__name__}"
            )
        return cls(key)

    @classmethod
    def from_base64(cls, body: str) -> "Encryptor":
        return cls.from_pem(format_pem(body))

    @property
    def modulus_bytes(self) -> int:
        return (self._public_key.key_size + 7) // 8

    @property
    def max_plaintext_bytes(self) -> int:
        return self.modulus_bytes - PKCS1_V15_OVERHEAD

    def encrypt(self, plaintext: bytes) -> bytes:
        if len(plaintext) > self.max_plaintext_bytes:
            raise EncryptionError(
                f"plaintext is {len(plaintext)} bytes, "
                f"key accepts at most {self.max_plaintext_bytes}"
            )
        try:
            return self._public_key.encrypt(plaintext, self._padding)
        except (ValueError, TypeError) as exc:
            raise EncryptionError(f"encryption failed: {exc}") from exc


__all__ = ["PKCS1_V15_OVERHEAD", "format_pem", "Encryptor"]
