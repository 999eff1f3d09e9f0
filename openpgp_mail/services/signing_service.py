"""
Detached signatures.
"""

import pgpy
import structlog
from pgpy.constants import CompressionAlgorithm, HashAlgorithm

from openpgp_mail.crypto.algorithms import to_pgpy_hash
from openpgp_mail.crypto.armor import MESSAGE, armor
from openpgp_mail.crypto.key_selector import KeyCapabilities
from openpgp_mail.crypto.layers import encode_packets, sign_content, signature_packet
from openpgp_mail.crypto.passphrase import PassphraseProvider, unlock_secret_key
from openpgp_mail.exceptions import InvalidArgumentError
from openpgp_mail.models.crypto import DigestAlgorithm

logger = structlog.get_logger(__name__)


def require_signing_key(secret_key: pgpy.PGPKey | None) -> None:
    """
    Raises:
        InvalidArgumentError: If the key is absent, public or not signing-capable.
    """
    if secret_key is None:
        msg = "A signing key is required"
        raise InvalidArgumentError(msg)
    key_id = secret_key.fingerprint.keyid
    if secret_key.is_public:
        msg = "The specified key is not a secret key"
        raise InvalidArgumentError(msg, key_id=key_id)
    if not KeyCapabilities.from_key(secret_key).can_sign:
        msg = "The specified secret key cannot be used for signing"
        raise InvalidArgumentError(msg, key_id=key_id)


def require_content(content: bytes | None) -> bytes:
    if content is None:
        msg = "Content is required"
        raise InvalidArgumentError(msg)
    return bytes(content)


def signer_user_id(secret_key: pgpy.PGPKey) -> str | None:
    """Search string pgpy resolves back to the key's first user id."""
    root = secret_key.parent if secret_key.parent is not None else secret_key
    uid = next(iter(root.userids), None)
    if uid is None:
        return None
    return uid.email or uid.name or None


class SigningService:
    """Produces detached signature containers."""

    def __init__(
        self,
        passphrase_provider: PassphraseProvider,
        *,
        compression: CompressionAlgorithm = CompressionAlgorithm.ZLIB,
    ) -> None:
        """
        Args:
            passphrase_provider: Unlocks secret keys for signing.
            compression: Compression layer wrapped around the signature.
        """
        self._passphrase_provider = passphrase_provider
        self._compression = compression

    def sign(
        self, secret_key: pgpy.PGPKey, digest: DigestAlgorithm, content: bytes
    ) -> bytes:
        """
        Sign ``content`` and return the armored signature container.

        Args:
            secret_key: Signing-capable secret key.
            digest: Digest algorithm for the signature.
            content: Bytes to sign.

        Returns:
            ASCII-armored compressed signature packet.

        Raises:
            InvalidArgumentError: If the key or content is unusable.
            UnsupportedAlgorithmError: If the digest cannot be used.
            KeyUnlockError: If the key cannot be unlocked.
        """
        require_signing_key(secret_key)
        content = require_content(content)
        hash_algorithm: HashAlgorithm = to_pgpy_hash(digest)

        with unlock_secret_key(secret_key, self._passphrase_provider) as key:
            signature = sign_content(key, content, hash_algorithm)

        data = encode_packets([signature_packet(signature)], self._compression)
        logger.debug(
            "Signed content",
            key_id=secret_key.fingerprint.keyid,
            digest=str(digest),
            size=len(content),
        )
        return armor(data, MESSAGE)
