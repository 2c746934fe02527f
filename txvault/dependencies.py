"""Dependency Injection Module.

The vault components are built once at startup (``build_vault``) and served
to request handlers from ``app.state`` through FastAPI dependencies.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request
from sqlalchemy.engine import Engine

from txvault.core.config import Settings
from txvault.domain.envelope.codec import EnvelopeCodec
from txvault.domain.envelope.master_key import MasterKeyProvider
from txvault.domain.envelope.ports import RecordStore
from txvault.domain.envelope.service import TransactionService

logger = logging.getLogger(__name__)


@dataclass
class Vault:
    """Wired components for one process."""
    settings: Settings
    master_keys: MasterKeyProvider
    codec: EnvelopeCodec
    store: RecordStore
    service: TransactionService
    engine: Optional[Engine] = None

    def close(self) -> None:
        self.store.close()


def build_master_key_provider(settings: Settings) -> MasterKeyProvider:
    return MasterKeyProvider(
        configured_key=settings.MASTER_KEY,
        key_file=settings.MASTER_KEY_FILE,
    )


def build_record_store(settings: Settings, init_db: bool = True):
    """Return ``(store, engine)`` for the configured backend. ``engine`` is None for memory."""
    if settings.STORAGE_BACKEND == "memory":
        from txvault.adapters.memory_store.stores import MemoryRecordStore
        logger.warning("Using in-memory record store; records are lost on restart")
        return MemoryRecordStore(), None

    from txvault.adapters.sql.record_store import SqlRecordStore
    from txvault.adapters.sql.session import build_engine, init_schema, run_migrations

    engine = build_engine(settings.DATABASE_URL)
    if init_db:
        if settings.RUN_MIGRATIONS:
            logger.info("Running DB Migrations...")
            run_migrations(settings.DATABASE_URL)
        else:
            init_schema(engine)
    return SqlRecordStore(engine), engine


def build_vault(settings: Settings, init_db: bool = True) -> Vault:
    """Resolve the master key and wire codec, store and service.

    Raises:
        MasterKeyError: if the configured master key cannot be trusted.
        RuntimeError: on invalid settings.
    """
    settings.check_startup()

    master_keys = build_master_key_provider(settings)
    master_keys.resolve()
    logger.info(f"Master key resolved (source={master_keys.source})")

    codec = EnvelopeCodec(master_keys)
    store, engine = build_record_store(settings, init_db=init_db)
    service = TransactionService(codec, store)
    return Vault(
        settings=settings,
        master_keys=master_keys,
        codec=codec,
        store=store,
        service=service,
        engine=engine,
    )


# --- Request Dependencies ---

def get_vault(request: Request) -> Vault:
    return request.app.state.vault


def get_transaction_service(request: Request) -> TransactionService:
    return get_vault(request).service


def get_record_store(request: Request) -> RecordStore:
    return get_vault(request).store


def get_settings(request: Request) -> Settings:
    return get_vault(request).settings
