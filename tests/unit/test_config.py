import pytest

from txvault.core.config import Settings, get_settings
from txvault.dependencies import build_vault
from txvault.domain.envelope.errors import MasterKeyError


def test_defaults():
    s = Settings()
    assert s.MODE == "dev"
    assert s.STORAGE_BACKEND == "sql"
    assert s.DATABASE_URL == "sqlite:///data/transactions.db"
    assert s.MASTER_KEY_FILE == "data/.master.key"
    assert s.LIST_DEFAULT_LIMIT == 100
    assert s.LIST_MAX_LIMIT == 1000
    assert s.TRACING_ENABLED is False


def test_env_overrides(monkeypatch, master_key_hex):
    monkeypatch.setenv("MASTER_KEY", master_key_hex)
    monkeypatch.setenv("STORAGE_BACKEND", "MEMORY")
    monkeypatch.setenv("MODE", "Prod")

    s = get_settings()
    assert s.MASTER_KEY == master_key_hex
    assert s.STORAGE_BACKEND == "memory"
    assert s.is_prod


def test_dotenv_file_is_read(tmp_path, master_key_hex):
    (tmp_path / ".env").write_text(f"MASTER_KEY={master_key_hex}\nLOG_LEVEL=DEBUG\n")
    s = Settings()
    assert s.MASTER_KEY == master_key_hex
    assert s.LOG_LEVEL == "DEBUG"


@pytest.mark.parametrize("kwargs,message", [
    ({"STORAGE_BACKEND": "redis"}, "STORAGE_BACKEND"),
    ({"MODE": "prod", "STORAGE_BACKEND": "memory"}, "must be 'sql'"),
    ({"MODE": "prod", "TRACING_ENABLED": True}, "OTEL_EXPORTER_OTLP_ENDPOINT"),
])
def test_check_startup_rejects(kwargs, message):
    with pytest.raises(RuntimeError, match=message):
        Settings(**kwargs).check_startup()


def test_check_startup_accepts_dev_memory():
    Settings(STORAGE_BACKEND="memory").check_startup()


def test_build_vault_with_memory_backend(master_key_hex):
    vault = build_vault(Settings(MASTER_KEY=master_key_hex, STORAGE_BACKEND="memory"))
    try:
        assert vault.engine is None
        assert vault.master_keys.source == "config"
        record = vault.service.encrypt("p", {"a": 1})
        assert vault.service.decrypt(record.id).payload == {"a": 1}
    finally:
        vault.close()


def test_build_vault_with_bad_master_key_fails_fast():
    with pytest.raises(MasterKeyError):
        build_vault(Settings(MASTER_KEY="abc", STORAGE_BACKEND="memory"))


def test_build_vault_generates_key_file(tmp_path):
    key_file = tmp_path / "keys" / "mk"
    vault = build_vault(Settings(MASTER_KEY_FILE=str(key_file), STORAGE_BACKEND="memory"))
    assert vault.master_keys.source == "generated"
    assert key_file.exists()
