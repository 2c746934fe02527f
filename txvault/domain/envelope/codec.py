"""Envelope Codec.

Per-record envelope encryption:

    payload --(AES-256-GCM, DEK)--------> payload_nonce / payload_ct / payload_tag
    DEK     --(AES-256-GCM, master key)-> dek_wrap_nonce / dek_wrapped / dek_wrap_tag

A fresh 32-byte DEK is generated for every encode. It only exists inside a
single encode or decode call and is never returned or persisted in the clear.

Security Note:
    Never log payloads, DEKs or master key material.
"""
import os
import json
import logging
from typing import Any

from .cipher import ALGORITHM_AES_256_GCM, KEY_LENGTH, SealedBox, seal, open_box
from .errors import AuthenticationFailed, DecryptionError, ValidationError
from .master_key import MasterKeyProvider
from .models import SecureRecord, DecryptedTransaction, MASTER_KEY_VERSION_V1
from .validator import validate_record
from txvault.utils.id import new_record_id, utc_timestamp

logger = logging.getLogger(__name__)

DEK_LENGTH = KEY_LENGTH


def canonical_json_bytes(obj: Any) -> bytes:
    """
    Serialize a payload to canonical JSON bytes.

    Rules:
    1. Keys sorted lexicographically.
    2. No whitespace (separators: (',', ':')).
    3. NaN and Infinity are rejected (not valid JSON).
    4. UTF-8 encoded, non-ASCII kept as-is.
    """
    canonical_str = json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return canonical_str.encode("utf-8")


class EnvelopeCodec:
    """Encodes payloads into SecureRecords and decodes them back."""

    def __init__(self, master_keys: MasterKeyProvider):
        self._master_keys = master_keys

    def encode(self, party_id: str, payload: Any) -> SecureRecord:
        """Encrypt ``payload`` for ``party_id``.

        No side effects beyond consuming randomness: the record is returned,
        not persisted.

        Raises:
            ValidationError: if ``payload`` is not JSON-serializable.
        """
        try:
            payload_bytes = canonical_json_bytes(payload)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"payload must be JSON-serializable: {e}", field="payload") from e

        master_key = self._master_keys.resolve()
        dek = os.urandom(DEK_LENGTH)

        payload_box = seal(payload_bytes, dek)
        dek_box = seal(dek, master_key)
        del dek

        return SecureRecord(
            id=new_record_id(),
            party_id=party_id,
            created_at=utc_timestamp(),
            payload_nonce=payload_box.nonce,
            payload_ct=payload_box.ciphertext,
            payload_tag=payload_box.tag,
            dek_wrap_nonce=dek_box.nonce,
            dek_wrapped=dek_box.ciphertext,
            dek_wrap_tag=dek_box.tag,
            alg=ALGORITHM_AES_256_GCM,
            mk_version=MASTER_KEY_VERSION_V1,
        )

    def validate(self, record: SecureRecord) -> None:
        validate_record(record)

    def decode(self, record: SecureRecord) -> DecryptedTransaction:
        """Validate, unwrap the DEK, decrypt and parse the payload.

        Raises:
            ValidationError: the record is malformed (nothing was decrypted).
            DecryptionError: authentication failed at either layer, or the
                plaintext is not valid JSON.
        """
        validate_record(record)
        master_key = self._master_keys.resolve()

        try:
            dek = open_box(
                SealedBox(
                    nonce=record.dek_wrap_nonce,
                    ciphertext=record.dek_wrapped,
                    tag=record.dek_wrap_tag,
                ),
                master_key,
            )
        except AuthenticationFailed:
            logger.warning(f"DEK unwrap failed for record {record.id}")
            raise DecryptionError(
                "Decryption failed: ciphertext or tag may be tampered", field="dek_wrapped"
            ) from None

        if len(dek) != DEK_LENGTH:
            # Authenticated under the master key but not a DEK this codec wrote.
            raise DecryptionError("Decryption failed: wrapped key has unexpected length", field="dek_wrapped")

        try:
            payload_bytes = open_box(
                SealedBox(
                    nonce=record.payload_nonce,
                    ciphertext=record.payload_ct,
                    tag=record.payload_tag,
                ),
                dek,
            )
        except AuthenticationFailed:
            logger.warning(f"Payload decryption failed for record {record.id}")
            raise DecryptionError(
                "Decryption failed: ciphertext or tag may be tampered", field="payload_ct"
            ) from None
        finally:
            del dek

        try:
            payload = json.loads(payload_bytes.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise DecryptionError(
                "Decryption failed: payload is not valid JSON", field="payload_ct"
            ) from None

        return DecryptedTransaction(
            party_id=record.party_id,
            payload=payload,
            created_at=record.created_at,
        )
