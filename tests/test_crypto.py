from __future__ import annotations

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, padding

from vote_simulator.crypto import Encryptor, format_pem
from vote_simulator.errors import EncryptionError, StartupError
from vote_simulator.payload import build_payload


def test_format_pem_wraps_at_64_columns():
    body = "A" * 150
    pem = format_pem(body)
    lines = pem.splitlines()
    assert lines[0] == "-----BEGIN PUBLIC KEY-----"
    assert lines[-1] == "-----END PUBLIC KEY-----"
    assert [len(line) for line in lines[1:-1]] == [64, 64, 22]
    assert pem.endswith("\n")


def test_format_pem_ignores_embedded_whitespace():
    assert format_pem("AB CD\nEF") == format_pem("ABCDEF")


def test_2048_bit_key_limits(encryptor):
    assert encryptor.modulus_bytes == 256
    assert encryptor.max_plaintext_bytes == 245


@pytest.mark.parametrize("length", [0, 1, 44, 245])
def test_ciphertext_is_modulus_sized(encryptor, length):
    assert len(encryptor.encrypt(b"v" * length)) == 256


def test_plaintext_over_limit_fails(encryptor):
    with pytest.raises(EncryptionError):
        encryptor.encrypt(b"v" * 246)


def test_private_key_recovers_payload(encryptor, private_key):
    payload = build_payload("Example", "Notch", nonce=0xABCD)
    ciphertext = encryptor.encrypt(payload)
    assert private_key.decrypt(ciphertext, padding.PKCS1v15()) == payload


def test_padding_is_randomised(encryptor):
    assert encryptor.encrypt(b"same") != encryptor.encrypt(b"same")


def test_malformed_key_is_startup_error():
    with pytest.raises(StartupError):
        Encryptor.from_base64("bm90IGEga2V5")


def test_non_rsa_key_is_startup_error():
    ec_key = ec.generate_private_key(ec.SECP256R1()).public_key()
    pem = ec_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    with pytest.raises(StartupError):
        Encryptor.from_pem(pem)
