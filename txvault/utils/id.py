import secrets
from datetime import datetime, timezone


def new_record_id() -> str:
    """Generate an opaque record ID: 16 random bytes, lowercase hex."""
    return secrets.token_hex(16)


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
