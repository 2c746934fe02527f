"""SqlRecordStore - Database-backed SecureRecord storage."""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, text
from sqlalchemy.engine import Engine

from txvault.adapters.sql.models import TransactionRow
from txvault.adapters.sql.session import build_sessionmaker
from txvault.domain.envelope.models import SecureRecord
from txvault.domain.envelope.ports import RecordStore

logger = logging.getLogger(__name__)


def _to_row(record: SecureRecord) -> TransactionRow:
    return TransactionRow(
        id=record.id,
        party_id=record.party_id,
        created_at=record.created_at,
        payload_nonce=record.payload_nonce,
        payload_ct=record.payload_ct,
        payload_tag=record.payload_tag,
        dek_wrap_nonce=record.dek_wrap_nonce,
        dek_wrapped=record.dek_wrapped,
        dek_wrap_tag=record.dek_wrap_tag,
        alg=record.alg,
        mk_version=record.mk_version,
        created_timestamp=datetime.now(timezone.utc),
    )


def _to_record(row: TransactionRow) -> SecureRecord:
    return SecureRecord(
        id=row.id,
        party_id=row.party_id,
        created_at=row.created_at,
        payload_nonce=row.payload_nonce,
        payload_ct=row.payload_ct,
        payload_tag=row.payload_tag,
        dek_wrap_nonce=row.dek_wrap_nonce,
        dek_wrapped=row.dek_wrapped,
        dek_wrap_tag=row.dek_wrap_tag,
        alg=row.alg,
        mk_version=row.mk_version,
    )


class SqlRecordStore(RecordStore):
    """SecureRecord storage over SQLAlchemy (SQLite or Postgres).

    Each operation runs in its own short-lived session, so one store instance
    is safe to share across request threads.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._sessions = build_sessionmaker(engine)

    def save(self, record: SecureRecord) -> None:
        with self._sessions() as db:
            db.add(_to_row(record))
            db.commit()

    def get(self, record_id: str) -> Optional[SecureRecord]:
        with self._sessions() as db:
            row = db.get(TransactionRow, record_id)
            return _to_record(row) if row else None

    def list_recent(self, limit: int = 100) -> List[SecureRecord]:
        stmt = (
            select(TransactionRow)
            .order_by(TransactionRow.created_timestamp.desc(), TransactionRow.created_at.desc())
            .limit(limit)
        )
        with self._sessions() as db:
            return [_to_record(row) for row in db.scalars(stmt).all()]

    def delete(self, record_id: str) -> bool:
        with self._sessions() as db:
            row = db.get(TransactionRow, record_id)
            if not row:
                return False
            db.delete(row)
            db.commit()
            return True

    def ping(self) -> None:
        with self._sessions() as db:
            db.execute(text("SELECT 1"))

    def close(self) -> None:
        self._engine.dispose()
        logger.info("Database engine disposed")
