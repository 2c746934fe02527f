"""Envelope Domain Models.

The field names and hex encodings of ``SecureRecord`` are the persisted wire
shape and must not change: stored records are read back by any
implementation sharing the same master key.
"""
from dataclasses import dataclass, fields
from typing import Any, Dict

from .cipher import ALGORITHM_AES_256_GCM
from .errors import ValidationError

MASTER_KEY_VERSION_V1 = 1

# Python attribute -> wire field name, for the two camelCase fields.
_WIRE_NAMES = {
    "party_id": "partyId",
    "created_at": "createdAt",
}


@dataclass(frozen=True)
class SecureRecord:
    """
    Persisted, at-rest representation of one encrypted transaction.

    Immutable: changing any cryptographic field invalidates its GCM tag.
    Values are stored exactly as read so that malformed records can reach
    the validator instead of failing at construction.
    """
    id: str
    party_id: str
    created_at: str

    payload_nonce: Any   # 12 bytes hex
    payload_ct: Any      # ciphertext hex
    payload_tag: Any     # 16 bytes hex

    dek_wrap_nonce: Any  # 12 bytes hex
    dek_wrapped: Any     # 32 bytes hex (wrapped DEK)
    dek_wrap_tag: Any    # 16 bytes hex

    alg: Any = ALGORITHM_AES_256_GCM
    mk_version: Any = MASTER_KEY_VERSION_V1

    def to_dict(self) -> Dict[str, Any]:
        return {
            _WIRE_NAMES.get(f.name, f.name): getattr(self, f.name)
            for f in fields(self)
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "SecureRecord":
        """Build a record from its wire shape.

        Raises:
            ValidationError: if ``data`` is not a mapping or a field is missing.
        """
        if not isinstance(data, dict):
            raise ValidationError("record must be a JSON object")

        values = {}
        for f in fields(SecureRecord):
            wire = _WIRE_NAMES.get(f.name, f.name)
            if wire not in data:
                raise ValidationError(f"{wire} is required", field=wire)
            values[f.name] = data[wire]
        return SecureRecord(**values)

    def summary(self) -> Dict[str, Any]:
        """Metadata returned to encrypt callers (no ciphertext)."""
        return {
            "id": self.id,
            "partyId": self.party_id,
            "createdAt": self.created_at,
            "alg": self.alg,
            "mk_version": self.mk_version,
        }


@dataclass(frozen=True)
class DecryptedTransaction:
    """Plaintext view of a record, produced by a successful decode."""
    party_id: str
    payload: Any
    created_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "partyId": self.party_id,
            "payload": self.payload,
            "createdAt": self.created_at,
        }
