"""
Key selection under the usability policy.
"""

from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Self

import pgpy
import structlog
from pgpy.constants import KeyFlags

from openpgp_mail.config import ExpiryPolicy
from openpgp_mail.crypto.key_store import KeyStore
from openpgp_mail.crypto.keyring import iter_keys
from openpgp_mail.crypto.passphrase import PassphraseProvider, unlock_secret_key
from openpgp_mail.exceptions import CertificateNotFoundError
from openpgp_mail.models.crypto import KeyUsage, PublicKeyAlgorithmTag

logger = structlog.get_logger(__name__)

_ENCRYPTION_FLAGS = frozenset({KeyFlags.EncryptCommunications, KeyFlags.EncryptStorage})


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _self_signature(key: pgpy.PGPKey) -> pgpy.PGPSignature | None:
    """Newest self-signature: over any user id for primary keys, else the binding."""
    candidates = []
    if key.is_primary:
        candidates = [uid.selfsig for uid in key.userids if uid.selfsig is not None]
    if not candidates:
        candidates = list(key.self_signatures)
    return max(candidates, key=lambda signature: _utc(signature.created), default=None)


def _is_revoked(key: pgpy.PGPKey) -> bool:
    if next(iter(key.revocation_signatures), None) is not None:
        return True
    return key.parent is not None and _is_revoked(key.parent)


@dataclass(frozen=True, kw_only=True)
class KeyCapabilities:
    """
    Usage-relevant facts about one key.

    Attributes:
        key_id: Key id of the described key.
        can_encrypt: Key may encrypt communications or storage.
        can_sign: Key may sign data.
        is_revoked: Key (or its primary) carries a revocation signature.
        created: Key creation time (UTC).
        validity_seconds: Lifetime after creation, 0 for no expiry.
    """

    key_id: str
    can_encrypt: bool
    can_sign: bool
    is_revoked: bool
    created: datetime
    validity_seconds: int = 0

    @property
    def expires_at(self) -> datetime | None:
        if self.validity_seconds == 0:
            return None
        return self.created + timedelta(seconds=self.validity_seconds)

    @classmethod
    def from_key(cls, key: pgpy.PGPKey) -> Self:
        """
        Extract capabilities from a pgpy key.

        Flags come from the key's self-signature. Keys without key flags fall
        back to what their algorithm can do.
        """
        signature = _self_signature(key)
        flags = set(signature.key_flags) if signature is not None else set()
        if flags:
            can_encrypt = bool(flags & _ENCRYPTION_FLAGS)
            can_sign = KeyFlags.Sign in flags
        else:
            try:
                algorithm = PublicKeyAlgorithmTag(int(key.key_algorithm))
            except ValueError:
                can_encrypt = can_sign = False
            else:
                can_encrypt, can_sign = algorithm.can_encrypt, algorithm.can_sign

        expiration = signature.key_expiration if signature is not None else None
        return cls(
            key_id=key.fingerprint.keyid,
            can_encrypt=can_encrypt,
            can_sign=can_sign,
            is_revoked=_is_revoked(key),
            created=_utc(key.created),
            validity_seconds=int(expiration.total_seconds()) if expiration else 0,
        )


def is_key_usable(
    capabilities: KeyCapabilities,
    usage: KeyUsage,
    now: datetime,
    policy: ExpiryPolicy = ExpiryPolicy.REJECT_EXPIRED,
) -> bool:
    """
    Return whether a key may be selected for ``usage`` at ``now``.

    A key qualifies when it has the capability, is not revoked and has not
    expired. ``ExpiryPolicy.LEGACY_INVERTED`` instead rejects keys whose
    expiry lies in the future.
    """
    match usage:
        case KeyUsage.ENCRYPT:
            capable = capabilities.can_encrypt
        case KeyUsage.SIGN:
            capable = capabilities.can_sign
    if not capable or capabilities.is_revoked:
        return False

    expires_at = capabilities.expires_at
    if expires_at is None:
        return True
    match policy:
        case ExpiryPolicy.REJECT_EXPIRED:
            return now < expires_at
        case ExpiryPolicy.LEGACY_INVERTED:
            return expires_at < now


def find_usable_key(
    rings: Iterable[pgpy.PGPKey],
    usage: KeyUsage,
    now: datetime,
    policy: ExpiryPolicy = ExpiryPolicy.REJECT_EXPIRED,
) -> pgpy.PGPKey | None:
    """First key of ``rings``, primary keys before their subkeys, usable for ``usage``."""
    for key in iter_keys(rings):
        if is_key_usable(KeyCapabilities.from_key(key), usage, now, policy):
            return key
    return None


def _utcnow() -> datetime:
    return datetime.now(UTC)


class KeySelector:
    """
    Chooses the key that answers a cryptographic request.

    Args:
        key_store: Source of public and secret bundles.
        expiry_policy: Expiry rule applied to candidates.
        clock: Returns the current time; tests pin it.
    """

    def __init__(
        self,
        key_store: KeyStore,
        *,
        expiry_policy: ExpiryPolicy = ExpiryPolicy.REJECT_EXPIRED,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._key_store = key_store
        self._expiry_policy = expiry_policy
        self._clock = clock

    def select_encryption_key(self, identity: str) -> pgpy.PGPKey:
        """
        Return the first public key of ``identity`` usable for encryption.

        Raises:
            CertificateNotFoundError: If no matching key qualifies.
        """
        rings = self._key_store.public_bundle.get_key_rings(identity)
        key = find_usable_key(rings, KeyUsage.ENCRYPT, self._clock(), self._expiry_policy)
        if key is None:
            msg = "No valid public key found"
            raise CertificateNotFoundError(msg, identity=identity)
        logger.debug("Selected encryption key", identity=identity, key_id=key.fingerprint.keyid)
        return key

    def select_encryption_keys(self, identities: Iterable[str]) -> list[pgpy.PGPKey]:
        """Resolve every identity; fails on the first one without a key."""
        return [self.select_encryption_key(identity) for identity in identities]

    def select_signing_key(self, identity: str) -> pgpy.PGPKey:
        """
        Return the first secret key of ``identity`` usable for signing.

        Raises:
            CertificateNotFoundError: If no matching key qualifies.
        """
        rings = self._key_store.secret_bundle.get_key_rings(identity)
        key = find_usable_key(rings, KeyUsage.SIGN, self._clock(), self._expiry_policy)
        if key is None:
            msg = "No valid signing key found"
            raise CertificateNotFoundError(msg, identity=identity)
        logger.debug("Selected signing key", identity=identity, key_id=key.fingerprint.keyid)
        return key

    def get_public_key(self, key_id: str) -> pgpy.PGPKey | None:
        return self._key_store.public_bundle.get_key(key_id)

    def get_secret_key(self, key_id: str) -> pgpy.PGPKey:
        """
        Return the secret key with exactly ``key_id``.

        Raises:
            CertificateNotFoundError: If no secret key has that id.
        """
        key = self._key_store.secret_bundle.get_key(key_id)
        if key is None:
            msg = "Secret key not found"
            raise CertificateNotFoundError(msg, key_id=key_id)
        return key

    @contextmanager
    def select_private_key(
        self, key_id: str, passphrase_provider: PassphraseProvider
    ) -> Iterator[pgpy.PGPKey]:
        """
        Yield the unlocked secret key with exactly ``key_id``.

        Raises:
            CertificateNotFoundError: If no secret key has that id.
            KeyUnlockError: If the passphrase is missing or wrong.
        """
        key = self.get_secret_key(key_id)
        with unlock_secret_key(key, passphrase_provider) as unlocked:
            yield unlocked
