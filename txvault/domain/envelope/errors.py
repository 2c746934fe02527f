"""Envelope Domain Errors.

Every failure surfaced by the envelope engine is an ``EnvelopeError`` with a
stable ``code``. Callers branch on the concrete class, never on the message.
"""
from typing import Optional


class EnvelopeError(ValueError):
    """Base class for envelope engine failures."""

    code = "ENVELOPE_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationError(EnvelopeError):
    """A record is structurally malformed (raised before any cryptography)."""

    code = "VALIDATION_FAILED"


class DecryptionError(EnvelopeError):
    """Authentication failed or the recovered plaintext is not valid JSON."""

    code = "DECRYPT_FAILED"


class AuthenticationFailed(EnvelopeError):
    """AES-GCM tag verification failed.

    Wrong key, tampered ciphertext, tampered tag and tampered nonce all map
    to this single condition.
    """

    code = "AUTH_TAG_MISMATCH"

    def __init__(self, message: str = "Authentication tag mismatch or key mismatch"):
        super().__init__(message)


class MasterKeyError(EnvelopeError):
    """The configured master key cannot be trusted. Fatal at startup."""

    code = "MASTER_KEY_INVALID"
