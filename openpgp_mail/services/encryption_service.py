"""
Encryption and sign-then-encrypt.
"""

from collections.abc import Iterable, Sequence

import pgpy
import structlog
from pgpy.constants import CompressionAlgorithm

from openpgp_mail.crypto.algorithms import to_pgpy_hash
from openpgp_mail.crypto.key_selector import KeyCapabilities
from openpgp_mail.crypto.layers import encrypt_message, literal_message, sign_content
from openpgp_mail.crypto.passphrase import PassphraseProvider, unlock_secret_key
from openpgp_mail.exceptions import InvalidArgumentError
from openpgp_mail.models.crypto import DigestAlgorithm
from openpgp_mail.services.signing_service import (
    require_content,
    require_signing_key,
    signer_user_id,
)

logger = structlog.get_logger(__name__)


def require_recipients(public_keys: Iterable[pgpy.PGPKey] | None) -> list[pgpy.PGPKey]:
    """
    Raises:
        InvalidArgumentError: If there are no recipients or one cannot encrypt.
    """
    if public_keys is None:
        msg = "Recipients are required"
        raise InvalidArgumentError(msg)
    recipients = list(public_keys)
    if not recipients:
        msg = "No recipients specified"
        raise InvalidArgumentError(msg)
    for key in recipients:
        if key is None or not KeyCapabilities.from_key(key).can_encrypt:
            key_id = key.fingerprint.keyid if key is not None else None
            msg = "One or more of the recipient keys cannot be used for encrypting"
            raise InvalidArgumentError(msg, key_id=key_id)
    return recipients


class EncryptionService:
    """
    Builds encrypted messages for one or more recipients.

    The session key is AES-256 with integrity protection, shared by all
    recipients.
    """

    def __init__(
        self,
        passphrase_provider: PassphraseProvider,
        *,
        compression: CompressionAlgorithm = CompressionAlgorithm.ZLIB,
        literal_filename: str = "mime.txt",
    ) -> None:
        """
        Args:
            passphrase_provider: Unlocks secret keys for sign-then-encrypt.
            compression: Compression layer inside the encryption layer.
            literal_filename: File name stored in the literal data packet.
        """
        self._passphrase_provider = passphrase_provider
        self._compression = compression
        self._literal_filename = literal_filename

    def encrypt(self, public_keys: Sequence[pgpy.PGPKey], content: bytes) -> bytes:
        """
        Encrypt ``content`` to every key in ``public_keys``.

        Returns:
            ASCII-armored encrypted message.

        Raises:
            InvalidArgumentError: If there are no recipients, a recipient cannot
                encrypt or the content is missing.
        """
        recipients = require_recipients(public_keys)
        content = require_content(content)

        message = literal_message(content, self._literal_filename, self._compression)
        encrypted = encrypt_message(message, recipients)
        logger.debug(
            "Encrypted content",
            recipients=[key.fingerprint.keyid for key in recipients],
            size=len(content),
        )
        return str(encrypted).encode("ascii")

    def sign_and_encrypt(
        self,
        secret_key: pgpy.PGPKey,
        digest: DigestAlgorithm,
        public_keys: Sequence[pgpy.PGPKey],
        content: bytes,
    ) -> bytes:
        """
        Sign ``content`` and encrypt it together with its signature.

        Inside the compressed layer the packets are a one-pass signature
        carrying the signer's user id, the literal data, then the signature.

        Returns:
            ASCII-armored encrypted message.

        Raises:
            InvalidArgumentError: If the signer, recipients or content are unusable.
            UnsupportedAlgorithmError: If the digest cannot be used.
            KeyUnlockError: If the signing key cannot be unlocked.
        """
        require_signing_key(secret_key)
        recipients = require_recipients(public_keys)
        content = require_content(content)
        hash_algorithm = to_pgpy_hash(digest)

        with unlock_secret_key(secret_key, self._passphrase_provider) as key:
            signature = sign_content(
                key, content, hash_algorithm, signer_user_id=signer_user_id(secret_key)
            )

        message = literal_message(content, self._literal_filename, self._compression)
        message |= signature
        encrypted = encrypt_message(message, recipients)
        logger.debug(
            "Signed and encrypted content",
            signer=secret_key.fingerprint.keyid,
            recipients=[key.fingerprint.keyid for key in recipients],
            size=len(content),
        )
        return str(encrypted).encode("ascii")
