import json
import logging

from txvault.logging_hardening import SecretRedactionFilter, redact, setup_logging_redaction


def test_redacts_record_fields_in_json(record):
    text = json.dumps(record.to_dict())
    out = redact(text)

    for name in ("payload_ct", "payload_tag", "payload_nonce", "dek_wrapped", "dek_wrap_tag", "dek_wrap_nonce"):
        assert getattr(record, name) not in out
        assert f'"{name}": "[REDACTED]"' in out
    # Metadata stays readable
    assert record.id in out
    assert "party-123" in out


def test_redacts_record_repr(record):
    out = redact(repr(record))
    assert record.dek_wrapped not in out
    assert record.payload_ct not in out
    assert "party_id='party-123'" in out


def test_redacts_keyword_style():
    assert redact("dek_wrapped=abcdef0123 ok") == "dek_wrapped=[REDACTED] ok"


def test_redacts_master_key(master_key_hex):
    assert master_key_hex not in redact(f"MASTER_KEY={master_key_hex}")
    assert master_key_hex not in redact(f"loaded key {master_key_hex}")


def test_leaves_ordinary_text_alone():
    msg = "Stored transaction 0123456789abcdef0123456789abcdef for party acme"
    assert redact(msg) == msg


def test_filter_rewrites_msg_and_args(master_key_hex):
    record = logging.LogRecord("t", logging.INFO, __file__, 1, "key %s", (master_key_hex,), None)
    assert SecretRedactionFilter().filter(record) is True
    assert master_key_hex not in record.getMessage()


def test_setup_attaches_single_filter(caplog, master_key_hex):
    logger = logging.getLogger("txvault.test")
    setup_logging_redaction()
    setup_logging_redaction()

    root = logging.getLogger()
    assert sum(isinstance(f, SecretRedactionFilter) for f in root.filters) == 1

    with caplog.at_level(logging.INFO):
        logger.info(f"MASTER_KEY={master_key_hex}")
    assert master_key_hex not in caplog.text
