"""Memory Store Implementations."""
import threading
from typing import Dict, List, Optional

from txvault.domain.envelope.models import SecureRecord
from txvault.domain.envelope.ports import RecordStore


class MemoryRecordStore(RecordStore):
    """Process-local record store. Contents are lost on restart."""

    def __init__(self):
        self._records: Dict[str, SecureRecord] = {}
        self._lock = threading.Lock()

    def save(self, record: SecureRecord) -> None:
        with self._lock:
            self._records[record.id] = record

    def get(self, record_id: str) -> Optional[SecureRecord]:
        return self._records.get(record_id)

    def list_recent(self, limit: int = 100) -> List[SecureRecord]:
        with self._lock:
            records = list(self._records.values())
        return list(reversed(records))[:limit]

    def delete(self, record_id: str) -> bool:
        with self._lock:
            return self._records.pop(record_id, None) is not None

    def ping(self) -> None:
        return None
