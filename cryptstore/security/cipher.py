"""AES-128 counter-mode helpers used to encrypt stored files.

The cipher is a plain stream cipher: ciphertext has the same length as the
plaintext and nothing is authenticated. Decrypting with the wrong key returns
garbage bytes and raises no error. Adding a MAC or switching to an AEAD mode
changes the on-disk format of every stored file.
"""

from __future__ import annotations

import binascii
import secrets
from dataclasses import dataclass
from typing import Final, Iterable, Union

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

KEY_SIZE: Final = 16
# Initial counter block: 128-bit big-endian integer 1.
INITIAL_COUNTER: Final = (1).to_bytes(16, "big")

BytesLike = Union[bytes, bytearray, memoryview]


class CryptoError(ValueError):
    """Raised for malformed keys or hex input."""


@dataclass(frozen=True, slots=True)
class Key:
    """Symmetric key in both raw and lowercase hex form."""

    bytes: bytes
    hex: str


def validate_key(key: Iterable[int] | None) -> bool:
    """Return True iff ``key`` holds exactly 16 values in [0, 255]."""
    if key is None:
        return False
    values = list(key)
    if len(values) != KEY_SIZE:
        return False
    return all(isinstance(value, int) and 0 <= value < 256 for value in values)


def generate_key() -> Key:
    """Generate a fresh random 128-bit key."""
    raw = secrets.token_bytes(KEY_SIZE)
    return Key(bytes=raw, hex=bytes_to_hex(raw))


def key_from_hex(hex_key: str | None) -> Key:
    """Decode and validate a 32-character hex key."""
    if not hex_key:
        raise CryptoError("No key configured")
    raw = hex_to_bytes(hex_key)
    if not validate_key(raw):
        raise CryptoError(f"Key must be {KEY_SIZE} bytes, got {len(raw)}")
    return Key(bytes=raw, hex=bytes_to_hex(raw))


def _transform(key: BytesLike, data: BytesLike) -> bytes:
    # CTR keystream XOR: the same operation encrypts and decrypts.
    cipher = Cipher(algorithms.AES(bytes(key)), modes.CTR(INITIAL_COUNTER))
    transformer = cipher.encryptor()
    return transformer.update(bytes(data)) + transformer.finalize()


def encrypt(key: BytesLike, plaintext: BytesLike) -> bytes:
    """Encrypt ``plaintext``. The key is expected to be validated by the caller."""
    return _transform(key, plaintext)


def decrypt(key: BytesLike, ciphertext: BytesLike) -> bytes:
    """Decrypt ``ciphertext`` produced by :func:`encrypt` with the same key."""
    return _transform(key, ciphertext)


def string_to_bytes(value: str) -> bytes:
    return value.encode("utf-8")


def bytes_to_string(data: BytesLike) -> str:
    return bytes(data).decode("utf-8")


def hex_to_bytes(value: str) -> bytes:
    """Decode a hex string, two characters per byte."""
    try:
        return binascii.unhexlify(value)
    except (binascii.Error, TypeError, ValueError) as exc:
        raise CryptoError(f"Malformed hex string: {exc}") from exc


def bytes_to_hex(data: BytesLike) -> str:
    return binascii.hexlify(bytes(data)).decode("ascii")
