"""Transaction Service.

Couples the envelope codec with a record store. The HTTP layer and the CLI
both go through this service, so persistence and decryption follow the same
path everywhere.
"""
import logging
from typing import Any, List

from .codec import EnvelopeCodec
from .errors import EnvelopeError
from .models import SecureRecord, DecryptedTransaction
from .ports import RecordStore

logger = logging.getLogger(__name__)


class RecordNotFound(EnvelopeError):
    """No record is stored under the requested ID."""

    code = "NOT_FOUND"

    def __init__(self, record_id: str):
        super().__init__(f"Transaction {record_id} not found", field="id")
        self.record_id = record_id


class TransactionService:
    """Encrypt-and-store / load-and-decrypt operations over a RecordStore."""

    def __init__(self, codec: EnvelopeCodec, store: RecordStore):
        self.codec = codec
        self.store = store

    def encrypt(self, party_id: str, payload: Any) -> SecureRecord:
        record = self.codec.encode(party_id, payload)
        self.store.save(record)
        logger.info(f"Stored transaction {record.id} for party {party_id}")
        return record

    def fetch(self, record_id: str) -> SecureRecord:
        """Return the stored record as-is (ciphertext only, never plaintext)."""
        record = self.store.get(record_id)
        if record is None:
            raise RecordNotFound(record_id)
        return record

    def decrypt(self, record_id: str) -> DecryptedTransaction:
        record = self.fetch(record_id)
        self.codec.validate(record)
        decrypted = self.codec.decode(record)
        logger.info(f"Decrypted transaction {record_id}")
        return decrypted

    def list_recent(self, limit: int = 100) -> List[SecureRecord]:
        return self.store.list_recent(limit)

    def delete(self, record_id: str) -> None:
        if not self.store.delete(record_id):
            raise RecordNotFound(record_id)
        logger.info(f"Deleted transaction {record_id}")
