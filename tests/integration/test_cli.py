import json
import os
import stat

import pytest
from click.testing import CliRunner

from txvault.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def env(tmp_path, master_key_hex):
    return {
        "MASTER_KEY": master_key_hex,
        "DATABASE_URL": f"sqlite:///{tmp_path / 'cli' / 'tx.db'}",
        "LOG_LEVEL": "ERROR",
    }


def _invoke(runner, env, *args):
    return runner.invoke(cli, list(args), env=env)


def _write_json(path, data):
    path.write_text(json.dumps(data))
    return str(path)


def test_keygen_prints_key(runner):
    result = runner.invoke(cli, ["keygen"])
    assert result.exit_code == 0
    key = result.stdout.strip()
    assert len(key) == 64
    int(key, 16)


def test_keygen_writes_owner_only_file(runner, tmp_path):
    target = tmp_path / "keys" / "master.key"

    result = runner.invoke(cli, ["keygen", "-o", str(target)])
    assert result.exit_code == 0
    assert len(target.read_text()) == 64
    if os.name == "posix":
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    # Refuses to clobber an existing key unless forced
    result = runner.invoke(cli, ["keygen", "-o", str(target)])
    assert result.exit_code == 1
    assert "already exists" in result.output

    before = target.read_text()
    result = runner.invoke(cli, ["keygen", "-o", str(target), "--force"])
    assert result.exit_code == 0
    assert target.read_text() != before


def test_encrypt_then_decrypt_file(runner, env, tmp_path):
    result = _invoke(runner, env, "encrypt", "--party-id", "party-123", "--payload", '{"amount": 1000, "currency": "USD"}')
    assert result.exit_code == 0, result.output
    record = json.loads(result.stdout)
    assert record["partyId"] == "party-123"
    assert record["alg"] == "AES-256-GCM"

    path = _write_json(tmp_path / "record.json", record)
    result = _invoke(runner, env, "decrypt", "--file", path)
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["payload"] == {"amount": 1000, "currency": "USD"}


def test_encrypt_rejects_invalid_json(runner, env):
    result = _invoke(runner, env, "encrypt", "--party-id", "p", "--payload", "{not json")
    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


def test_decrypt_tampered_file(runner, env, tmp_path, flip_bit):
    record = json.loads(_invoke(runner, env, "encrypt", "--party-id", "p", "--payload", "{}").stdout)
    record["dek_wrap_tag"] = flip_bit(record["dek_wrap_tag"])

    result = _invoke(runner, env, "decrypt", "--file", _write_json(tmp_path / "bad.json", record))
    assert result.exit_code == 1
    assert "[DECRYPT_FAILED]" in result.output


def test_decrypt_with_wrong_key(runner, env, tmp_path, other_master_key_hex):
    record = json.loads(_invoke(runner, env, "encrypt", "--party-id", "p", "--payload", "{}").stdout)
    path = _write_json(tmp_path / "record.json", record)

    result = _invoke(runner, {**env, "MASTER_KEY": other_master_key_hex}, "decrypt", "--file", path)
    assert result.exit_code == 1
    assert "[DECRYPT_FAILED]" in result.output


def test_decrypt_requires_exactly_one_source(runner, env, tmp_path):
    path = _write_json(tmp_path / "r.json", {})
    assert _invoke(runner, env, "decrypt").exit_code == 1
    assert _invoke(runner, env, "decrypt", "--file", path, "--id", "x").exit_code == 1


def test_validate(runner, env, tmp_path):
    record = json.loads(_invoke(runner, env, "encrypt", "--party-id", "p", "--payload", "{}").stdout)

    ok = runner.invoke(cli, ["validate", "--file", _write_json(tmp_path / "ok.json", record)])
    assert ok.exit_code == 0
    assert record["id"] in ok.output

    record["payload_nonce"] = "00" * 10
    bad = runner.invoke(cli, ["validate", "--file", _write_json(tmp_path / "bad.json", record)])
    assert bad.exit_code == 1
    assert "[VALIDATION_FAILED] payload_nonce must be 12 bytes" in bad.output


def test_validate_missing_field(runner, tmp_path):
    result = runner.invoke(cli, ["validate", "--file", _write_json(tmp_path / "r.json", {"id": "x"})])
    assert result.exit_code == 1
    assert "is required" in result.output


def test_store_list_and_decrypt_by_id(runner, env):
    result = _invoke(runner, env, "init-db")
    assert result.exit_code == 0, result.output
    assert "Storage initialized (sql)" in result.stdout

    stored = json.loads(_invoke(runner, env, "encrypt", "--party-id", "acme", "--payload", '{"n": 1}', "--store").stdout)

    listed = _invoke(runner, env, "list", "--format", "json")
    assert listed.exit_code == 0, listed.output
    summaries = json.loads(listed.stdout)
    assert [s["id"] for s in summaries] == [stored["id"]]
    assert "payload_ct" not in summaries[0]

    table = _invoke(runner, env, "list")
    assert stored["id"] in table.stdout

    result = _invoke(runner, env, "decrypt", "--id", stored["id"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout) == {
        "id": stored["id"],
        "partyId": "acme",
        "payload": {"n": 1},
        "createdAt": stored["createdAt"],
    }


def test_decrypt_unknown_id(runner, env):
    result = _invoke(runner, env, "decrypt", "--id", "missing")
    assert result.exit_code == 1
    assert "[NOT_FOUND]" in result.output


def test_list_empty(runner, env):
    result = _invoke(runner, env, "list")
    assert result.exit_code == 0
    assert "No transactions found." in result.stdout


def test_bad_master_key_is_reported(runner, env):
    result = _invoke(runner, {**env, "MASTER_KEY": "abc"}, "encrypt", "--party-id", "p", "--payload", "{}")
    assert result.exit_code == 1
    assert "must be 64 hex characters" in result.output


def test_decrypt_non_utf8_file(runner, env, tmp_path):
    path = tmp_path / "binary.json"
    path.write_bytes(b"\xff\xfe{\x00")

    result = _invoke(runner, env, "decrypt", "--file", str(path))
    assert result.exit_code == 1
    assert "Cannot load record" in result.output


def test_validate_invalid_json_file(runner, tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    result = runner.invoke(cli, ["validate", "--file", str(path)])
    assert result.exit_code == 1
    assert "Error: Cannot load record" in result.output
