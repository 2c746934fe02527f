"""Authenticated Cipher.

Single-purpose AES-256-GCM wrapper. Binary values cross this boundary as
lowercase hex strings, the same encoding the persisted records use.
"""
import os
import binascii
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .errors import AuthenticationFailed

ALGORITHM_AES_256_GCM = "AES-256-GCM"
KEY_LENGTH = 32    # AES-256
NONCE_LENGTH = 12  # 96-bit GCM nonce
TAG_LENGTH = 16    # 128-bit GCM tag


@dataclass(frozen=True)
class SealedBox:
    """Output of a single AES-GCM seal. All fields are lowercase hex."""
    nonce: str       # 24 hex chars (12 bytes)
    ciphertext: str  # Hex, same length as the plaintext
    tag: str         # 32 hex chars (16 bytes)


def _check_key(key: bytes) -> AESGCM:
    if len(key) != KEY_LENGTH:
        raise ValueError(f"AES-256-GCM key must be {KEY_LENGTH} bytes. Got {len(key)}")
    return AESGCM(key)


def seal(plaintext: bytes, key: bytes) -> SealedBox:
    """Encrypt ``plaintext`` under ``key`` with a fresh random nonce.

    Nonces are random 96-bit values, not counters.
    """
    aesgcm = _check_key(key)
    nonce = os.urandom(NONCE_LENGTH)
    ct_and_tag = aesgcm.encrypt(nonce, plaintext, None)

    ciphertext = ct_and_tag[:-TAG_LENGTH]
    tag = ct_and_tag[-TAG_LENGTH:]

    return SealedBox(
        nonce=binascii.hexlify(nonce).decode("ascii"),
        ciphertext=binascii.hexlify(ciphertext).decode("ascii"),
        tag=binascii.hexlify(tag).decode("ascii"),
    )


def open_box(box: SealedBox, key: bytes) -> bytes:
    """Verify and decrypt ``box``.

    Raises:
        AuthenticationFailed: on any mismatch between key, nonce, ciphertext
            and tag. The cause is deliberately not reported.
    """
    aesgcm = _check_key(key)
    try:
        nonce = binascii.unhexlify(box.nonce)
        ciphertext = binascii.unhexlify(box.ciphertext)
        tag = binascii.unhexlify(box.tag)
    except (binascii.Error, ValueError, TypeError):
        raise AuthenticationFailed() from None

    if len(tag) != TAG_LENGTH:
        raise AuthenticationFailed()

    try:
        return aesgcm.decrypt(nonce, ciphertext + tag, None)
    except (InvalidTag, ValueError):
        raise AuthenticationFailed() from None
