import pytest

from txvault.domain.envelope.codec import EnvelopeCodec
from txvault.domain.envelope.master_key import MasterKeyProvider

TEST_MASTER_KEY_HEX = "00112233445566778899aabbccddeeff" * 2
OTHER_MASTER_KEY_HEX = "ffeeddccbbaa99887766554433221100" * 2


def _flip_bit(hex_str: str, byte_index: int = 0, bit: int = 0) -> str:
    data = bytearray.fromhex(hex_str)
    data[byte_index] ^= 1 << bit
    return data.hex()


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the developer's environment and ./data."""
    for name in ("MASTER_KEY", "MASTER_KEY_FILE", "DATABASE_URL", "STORAGE_BACKEND",
                 "MODE", "TRACING_ENABLED", "RUN_MIGRATIONS", "OTEL_EXPORTER_OTLP_ENDPOINT",
                 "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def flip_bit():
    """Return a helper that flips one bit of a hex string."""
    return _flip_bit


@pytest.fixture
def master_key_hex():
    return TEST_MASTER_KEY_HEX


@pytest.fixture
def other_master_key_hex():
    return OTHER_MASTER_KEY_HEX


@pytest.fixture
def master_keys():
    return MasterKeyProvider(configured_key=TEST_MASTER_KEY_HEX)


@pytest.fixture
def codec(master_keys):
    return EnvelopeCodec(master_keys)


@pytest.fixture
def record(codec):
    return codec.encode("party-123", {"amount": 1000, "currency": "USD"})
