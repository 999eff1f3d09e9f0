"""
Passphrase providers and secret key unlocking.
"""

from collections.abc import Iterator, Mapping
from contextlib import ExitStack, contextmanager
from typing import Protocol, runtime_checkable

import pgpy
import structlog
from pgpy.errors import PGPDecryptionError

from openpgp_mail.crypto.secure_bytes import SecureBytes
from openpgp_mail.exceptions import KeyUnlockError

logger = structlog.get_logger(__name__)


@runtime_checkable
class PassphraseProvider(Protocol):
    """Returns the passphrase protecting a secret key."""

    def __call__(self, key: pgpy.PGPKey) -> SecureBytes | str: ...


class StaticPassphraseProvider:
    """
    Answers from passphrases known up front.

    Args:
        default: Passphrase used when a key has no specific entry.
        by_key_id: Passphrases keyed by primary or subkey key id.
    """

    def __init__(
        self, default: str | None = None, *, by_key_id: Mapping[str, str] | None = None
    ) -> None:
        self._secrets = {
            key_id.upper(): SecureBytes.from_string(value)
            for key_id, value in (by_key_id or {}).items()
        }
        self._default = SecureBytes.from_string(default) if default is not None else None

    def __call__(self, key: pgpy.PGPKey) -> SecureBytes:
        candidates = [key.fingerprint.keyid]
        if key.parent is not None:
            candidates.append(key.parent.fingerprint.keyid)
        for key_id in candidates:
            if key_id in self._secrets:
                return self._secrets[key_id].copy()
        if self._default is None:
            msg = "No passphrase known for key"
            raise KeyUnlockError(msg, key_id=key.fingerprint.keyid)
        return self._default.copy()


def _get_passphrase(key: pgpy.PGPKey, provider: PassphraseProvider) -> SecureBytes:
    key_id = key.fingerprint.keyid
    try:
        passphrase = provider(key)
    except KeyUnlockError:
        raise
    except Exception as e:
        msg = f"Passphrase provider failed: {e}"
        raise KeyUnlockError(msg, key_id=key_id) from e
    if isinstance(passphrase, str):
        passphrase = SecureBytes.from_string(passphrase)
    if not isinstance(passphrase, SecureBytes):
        msg = "Passphrase provider returned an unsupported value"
        raise KeyUnlockError(msg, key_id=key_id)
    return passphrase


@contextmanager
def unlock_secret_key(key: pgpy.PGPKey, provider: PassphraseProvider) -> Iterator[pgpy.PGPKey]:
    """
    Unlock a secret key for the duration of the block.

    Subkeys are unlocked through their primary key. The key is locked again
    on exit, including when the block raises.

    Args:
        key: Secret primary key or subkey.
        provider: Source of the passphrase.

    Yields:
        ``key`` with its private material usable.

    Raises:
        KeyUnlockError: If the provider fails or the passphrase is wrong.
    """
    if key.is_public:
        msg = "Cannot unlock a public key"
        raise KeyUnlockError(msg, key_id=key.fingerprint.keyid)

    root = key.parent if key.parent is not None else key
    if not root.is_protected:
        yield key
        return

    key_id = key.fingerprint.keyid
    passphrase = _get_passphrase(root, provider)
    with ExitStack() as stack:
        with passphrase:
            try:
                stack.enter_context(root.unlock(passphrase.decode()))
            except PGPDecryptionError as e:
                msg = "Wrong passphrase"
                raise KeyUnlockError(msg, key_id=key_id) from e
            except UnicodeDecodeError as e:
                msg = "Passphrase is not valid UTF-8"
                raise KeyUnlockError(msg, key_id=key_id) from e
        logger.debug("Unlocked secret key", key_id=key_id)
        yield key
