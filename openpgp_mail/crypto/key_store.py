"""
Key store holding the public and secret key-ring bundles.
"""

import os
import shutil
from pathlib import Path
from typing import Self

import structlog

from openpgp_mail.config import OpenPgpConfig
from openpgp_mail.crypto.keyring import KeyRingBundle
from openpgp_mail.exceptions import KeyRingError

logger = structlog.get_logger(__name__)


def _load_bundle(path: Path) -> KeyRingBundle:
    if not path.exists():
        logger.debug("Key-ring file missing, starting empty", path=str(path))
        return KeyRingBundle()
    try:
        data = path.read_bytes()
    except OSError as e:
        msg = f"Failed to read key-ring: {e}"
        raise KeyRingError(msg, path=str(path)) from e
    try:
        return KeyRingBundle.parse(data)
    except KeyRingError as e:
        raise KeyRingError(e.message, path=str(path)) from e


def backup_path(path: Path) -> Path:
    return path.with_name(f"{path.name}~")


def temp_path(path: Path) -> Path:
    return path.with_name(f".{path.name}~")


def write_atomic(path: Path, data: bytes) -> None:
    """
    Replace ``path`` with ``data`` without ever leaving it truncated.

    The data is written and synced to a hidden temp file next to ``path``;
    the current file is copied to the backup path and the temp file is then
    renamed over ``path``.

    Raises:
        KeyRingError: If any step fails. ``path`` is left untouched.
    """
    tmp = temp_path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("wb") as stream:
            stream.write(data)
            stream.flush()
            os.fsync(stream.fileno())
        if path.exists():
            shutil.copy2(path, backup_path(path))
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        msg = f"Failed to save key-ring: {e}"
        raise KeyRingError(msg, path=str(path)) from e


class KeyStore:
    """
    Owns the two key-ring bundles of a context.

    Bundles are loaded once at construction; a missing file is an empty
    bundle. The public bundle is replaced wholesale, never edited in place,
    and the secret bundle is read-only.

    Args:
        public_keyring_path: File holding the public bundle.
        secret_keyring_path: File holding the secret bundle.
    """

    def __init__(self, public_keyring_path: str | Path, secret_keyring_path: str | Path) -> None:
        self._public_path = Path(public_keyring_path)
        self._secret_path = Path(secret_keyring_path)
        self._public_bundle = _load_bundle(self._public_path)
        self._secret_bundle = _load_bundle(self._secret_path)
        logger.debug(
            "Loaded key-rings",
            public_rings=len(self._public_bundle),
            secret_rings=len(self._secret_bundle),
        )

    @classmethod
    def from_config(cls, config: OpenPgpConfig) -> Self:
        return cls(config.public_keyring_path, config.secret_keyring_path)

    @property
    def public_keyring_path(self) -> Path:
        return self._public_path

    @property
    def secret_keyring_path(self) -> Path:
        return self._secret_path

    @property
    def public_bundle(self) -> KeyRingBundle:
        return self._public_bundle

    @property
    def secret_bundle(self) -> KeyRingBundle:
        return self._secret_bundle

    def replace_public_bundle(self, bundle: KeyRingBundle) -> None:
        """
        Persist ``bundle`` and make it the public bundle.

        Raises:
            KeyRingError: If persisting fails; the in-memory bundle is kept.
        """
        write_atomic(self._public_path, bundle.encode())
        self._public_bundle = bundle
        logger.info("Saved public key-ring", path=str(self._public_path), rings=len(bundle))

    def save_public_key_ring(self) -> None:
        """Persist the current public bundle."""
        self.replace_public_bundle(self._public_bundle)
