"""Envelope Domain Ports (Interfaces)."""
from abc import ABC, abstractmethod
from typing import List, Optional

from .models import SecureRecord


class RecordStore(ABC):
    """Abstract Port for SecureRecord persistence.

    Implementations must round-trip every field exactly: hex fields as text,
    ``mk_version`` as an integer.
    """

    @abstractmethod
    def save(self, record: SecureRecord) -> None:
        """Persist a new record."""
        ...

    @abstractmethod
    def get(self, record_id: str) -> Optional[SecureRecord]:
        """Return the record stored under ``record_id``, if any."""
        ...

    @abstractmethod
    def list_recent(self, limit: int = 100) -> List[SecureRecord]:
        """Return up to ``limit`` records, newest first."""
        ...

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """Delete a record. Returns False if it did not exist."""
        ...

    @abstractmethod
    def ping(self) -> None:
        """Raise if the backing store is unreachable."""
        ...

    def close(self) -> None:
        """Release backing resources."""
        return None
