import pytest
from fastapi.testclient import TestClient

from txvault.adapters.memory_store.stores import MemoryRecordStore
from txvault.adapters.sql.record_store import SqlRecordStore
from txvault.adapters.sql.session import build_engine, init_schema
from txvault.core.config import Settings
from txvault.main import create_app


@pytest.fixture
def sql_engine():
    # In-memory SQLite for storage logic verification
    engine = build_engine("sqlite:///:memory:")
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture(params=["sql", "memory"])
def store(request, sql_engine):
    if request.param == "sql":
        return SqlRecordStore(sql_engine)
    return MemoryRecordStore()


@pytest.fixture(params=["sql", "memory"])
def client(request, master_key_hex):
    settings = Settings(
        MASTER_KEY=master_key_hex,
        STORAGE_BACKEND=request.param,
        DATABASE_URL="sqlite:///:memory:",
        LOG_LEVEL="WARNING",
    )
    with TestClient(create_app(settings)) as c:
        yield c
