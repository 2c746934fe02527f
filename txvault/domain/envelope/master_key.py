"""Master Key Provider.

Resolves the single process-wide AES-256 master key that wraps every DEK.

Resolution order (first match wins):
    1. Explicit configuration value (64 hex characters).
    2. Persisted key file (a single line of lowercase hex).
    3. Freshly generated key, persisted to the key file.

Security Note:
    Never log key material. Only the key source is logged.
"""
import os
import re
import logging
import threading
import binascii
import tempfile
from pathlib import Path
from typing import Optional, Union

from .cipher import KEY_LENGTH
from .errors import MasterKeyError

logger = logging.getLogger(__name__)

_KEY_HEX_PATTERN = re.compile(r"[0-9a-fA-F]{64}")

DEFAULT_KEY_FILE = Path("data") / ".master.key"


def _decode_key(value: str, source: str) -> bytes:
    if not _KEY_HEX_PATTERN.fullmatch(value):
        raise MasterKeyError(
            f"Master key from {source} must be {KEY_LENGTH * 2} hex characters "
            f"(got len={len(value)})"
        )
    return binascii.unhexlify(value)


class MasterKeyProvider:
    """Resolves the master key once and serves it for the provider's lifetime.

    The provider is constructed explicitly at startup and injected into the
    envelope codec; there is no module-level key.
    """

    def __init__(
        self,
        configured_key: Optional[str] = None,
        key_file: Union[str, Path] = DEFAULT_KEY_FILE,
    ):
        self._configured_key = configured_key.strip() if configured_key else None
        self._key_file = Path(key_file)
        self._key: Optional[bytes] = None
        self._source: Optional[str] = None
        self._lock = threading.Lock()

    @property
    def key_file(self) -> Path:
        return self._key_file

    @property
    def source(self) -> Optional[str]:
        """Where the key came from: ``config``, ``file`` or ``generated``."""
        return self._source

    def resolve(self) -> bytes:
        """Return the 32-byte master key, resolving it on first call.

        Raises:
            MasterKeyError: if the configured value or the key file holds
                malformed hex or the wrong length.
        """
        if self._key is not None:
            return self._key

        with self._lock:
            if self._key is None:
                self._key, self._source = self._load()
        return self._key

    def _load(self):
        if self._configured_key:
            logger.info("Using master key from MASTER_KEY configuration value")
            return _decode_key(self._configured_key, "MASTER_KEY"), "config"

        if self._key_file.exists():
            return self._read_key_file(), "file"

        logger.info(f"Generating new master key and saving to {self._key_file}")
        key_hex = generate_key_hex()
        try:
            write_key_file(self._key_file, key_hex)
        except FileExistsError:
            # Another process created the file first; its key wins.
            return self._read_key_file(), "file"

        logger.warning("Master key saved. Keep this file secure and backed up!")
        return binascii.unhexlify(key_hex), "generated"

    def _read_key_file(self) -> bytes:
        try:
            key_hex = self._key_file.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise MasterKeyError(f"Cannot read master key file {self._key_file}: {e}") from e
        logger.info(f"Loaded master key from {self._key_file}")
        return _decode_key(key_hex, str(self._key_file))


def generate_key_hex() -> str:
    """Return a fresh random master key as 64 lowercase hex characters."""
    return binascii.hexlify(os.urandom(KEY_LENGTH)).decode("ascii")


def write_key_file(path: Union[str, Path], key_hex: str, overwrite: bool = False) -> None:
    """Write ``key_hex`` to ``path``, readable by the owner only.

    The key is written to a 0600 temporary file in the same directory and
    then linked (or, with ``overwrite``, renamed) into place, so ``path``
    never exists with partial contents or wider permissions.

    Raises:
        FileExistsError: if ``path`` exists and ``overwrite`` is False.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=".key")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(key_hex)
        if overwrite:
            os.replace(tmp_path, path)
        else:
            os.link(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
