"""Record Validator.

Structural checks on a persisted record, run before any decrypt attempt.
Checks run in a fixed order and stop at the first failure:

    1. nonces      (payload_nonce, dek_wrap_nonce): hex, exactly 12 bytes
    2. tags        (payload_tag, dek_wrap_tag):     hex, exactly 16 bytes
    3. ciphertexts (payload_ct, dek_wrapped):       hex, non-empty
    4. alg         == AES-256-GCM
    5. mk_version  == 1
"""
import re
from typing import Any

from .cipher import ALGORITHM_AES_256_GCM, NONCE_LENGTH, TAG_LENGTH
from .errors import ValidationError
from .models import SecureRecord, MASTER_KEY_VERSION_V1

_HEX_PATTERN = re.compile(r"[0-9a-fA-F]*")

NONCE_FIELDS = ("payload_nonce", "dek_wrap_nonce")
TAG_FIELDS = ("payload_tag", "dek_wrap_tag")
CIPHERTEXT_FIELDS = ("payload_ct", "dek_wrapped")


def is_valid_hex(value: Any) -> bool:
    """True for a string of hex digits that decodes to whole bytes."""
    return (
        isinstance(value, str)
        and _HEX_PATTERN.fullmatch(value) is not None
        and len(value) % 2 == 0
    )


def _require_hex(value: Any, field_name: str) -> None:
    if not is_valid_hex(value):
        raise ValidationError(f"{field_name} must be valid hex", field=field_name)


def validate_fixed_length(value: Any, field_name: str, length: int) -> None:
    _require_hex(value, field_name)
    if len(value) // 2 != length:
        raise ValidationError(f"{field_name} must be {length} bytes", field=field_name)


def validate_ciphertext(value: Any, field_name: str) -> None:
    _require_hex(value, field_name)
    if len(value) == 0:
        raise ValidationError(f"{field_name} cannot be empty", field=field_name)


def validate_record(record: SecureRecord) -> None:
    """Validate ``record`` without touching any key material.

    Raises:
        ValidationError: naming the first offending field.
    """
    for name in NONCE_FIELDS:
        validate_fixed_length(getattr(record, name), name, NONCE_LENGTH)

    for name in TAG_FIELDS:
        validate_fixed_length(getattr(record, name), name, TAG_LENGTH)

    for name in CIPHERTEXT_FIELDS:
        validate_ciphertext(getattr(record, name), name)

    if record.alg != ALGORITHM_AES_256_GCM:
        raise ValidationError(
            f"alg must be {ALGORITHM_AES_256_GCM} (got {record.alg!r})", field="alg"
        )

    # bool is an int subclass; True must not pass as version 1.
    version = record.mk_version
    if not isinstance(version, int) or isinstance(version, bool) or version != MASTER_KEY_VERSION_V1:
        raise ValidationError(
            f"mk_version must be {MASTER_KEY_VERSION_V1} (got {record.mk_version!r})",
            field="mk_version",
        )
