"""Logging Hardening and Redaction.

This module provides filters that keep SecureRecord cryptographic fields and
master key material out of application logs.
"""
import logging
import re

REDACTED = "[REDACTED]"

_RECORD_FIELDS = r"(?:payload_nonce|payload_ct|payload_tag|dek_wrap_nonce|dek_wrapped|dek_wrap_tag)"

SECRET_PATTERNS = [
    # JSON-style: "payload_ct": "ab12..."
    (re.compile(r'("' + _RECORD_FIELDS + r'"\s*:\s*")[0-9a-fA-F]+(")'), r"\1" + REDACTED + r"\2"),
    # repr-style: payload_ct='ab12...'
    (re.compile(r"(\b" + _RECORD_FIELDS + r"=')[0-9a-fA-F]+(')"), r"\1" + REDACTED + r"\2"),
    # keyword-style: payload_ct=ab12...
    (re.compile(r"(\b" + _RECORD_FIELDS + r"=)[0-9a-fA-F]+"), r"\1" + REDACTED),
    # MASTER_KEY=<64 hex> in any form
    (re.compile(r"(MASTER_KEY\W{0,3})[0-9a-fA-F]{64}"), r"\1" + REDACTED),
    # Bare 256-bit hex keys
    (re.compile(r"\b[0-9a-fA-F]{64}\b"), REDACTED),
]


def redact(text: str) -> str:
    for pattern, replacement in SECRET_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SecretRedactionFilter(logging.Filter):
    """Filter that redacts secret-like patterns from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = redact(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                redact(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger once and attach the redaction filter."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(
            level=level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        root_logger.setLevel(level.upper())
    setup_logging_redaction()


def setup_logging_redaction() -> None:
    """Apply the SecretRedactionFilter to the root logger, its handlers and existing loggers."""
    redact_filter = SecretRedactionFilter()

    root_logger = logging.getLogger()

    # Remove existing filters if any (to avoid duplicates)
    for target in [root_logger, *root_logger.handlers]:
        for f in target.filters[:]:
            if isinstance(f, SecretRedactionFilter):
                target.removeFilter(f)
        target.addFilter(redact_filter)

    for name in list(logging.root.manager.loggerDict):
        logger = logging.getLogger(name)
        for f in logger.filters[:]:
            if isinstance(f, SecretRedactionFilter):
                logger.removeFilter(f)
        logger.addFilter(redact_filter)

    logging.info("Logging redaction filters active.")
