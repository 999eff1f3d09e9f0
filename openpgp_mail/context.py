"""
OpenPGP context facade.

This is the main entry point for users of the library. It wires the key
store, key selector and message services together and accepts identities
(mailbox addresses) wherever keys are expected.
"""

from collections.abc import Callable, Iterable
from datetime import datetime
from typing import Self, TypeAlias

import pgpy
import structlog

from openpgp_mail.config import OpenPgpConfig
from openpgp_mail.crypto.key_selector import KeySelector
from openpgp_mail.crypto.key_store import KeyStore
from openpgp_mail.crypto.keyring import KeyRingBundle
from openpgp_mail.crypto.passphrase import PassphraseProvider
from openpgp_mail.exceptions import InvalidArgumentError
from openpgp_mail.models.crypto import DigestAlgorithm
from openpgp_mail.models.mime import (
    ENCRYPTION_PROTOCOL,
    KEY_EXCHANGE_PROTOCOL,
    OCTET_STREAM,
    SIGNATURE_PROTOCOL,
    MimeAttachment,
)
from openpgp_mail.models.signatures import DecryptionResult, DigitalSignature
from openpgp_mail.services.decryption_service import (
    DecryptionService,
    DocumentParser,
    parse_mime_entity,
)
from openpgp_mail.services.encryption_service import EncryptionService
from openpgp_mail.services.key_exchange_service import ExportSource, KeyExchangeService
from openpgp_mail.services.signing_service import SigningService
from openpgp_mail.services.verification_service import VerificationService

logger = structlog.get_logger(__name__)

SIGNATURE_FILENAME = "signature.asc"
ENCRYPTED_FILENAME = "encrypted.asc"
KEYS_FILENAME = "keys.asc"

Signer: TypeAlias = str | pgpy.PGPKey
Recipients: TypeAlias = Iterable[str | pgpy.PGPKey]


class OpenPgpContext:
    """
    Signs, encrypts, decrypts and verifies message payloads with local keys.

    Example:
        ```python
        config = OpenPgpConfig.from_directory("~/.gnupg")
        context = OpenPgpContext(config, StaticPassphraseProvider("secret"))

        encrypted = context.sign_and_encrypt(
            "me@example.com", DigestAlgorithm.SHA256, ["alice@example.com"], b"hello"
        )
        result = context.decrypt(encrypted.content)
        ```

    Operations are synchronous. A context is meant for one writer at a time;
    callers sharing one must serialize access themselves.
    """

    signature_protocol = SIGNATURE_PROTOCOL
    encryption_protocol = ENCRYPTION_PROTOCOL
    key_exchange_protocol = KEY_EXCHANGE_PROTOCOL

    def __init__(
        self,
        config: OpenPgpConfig,
        passphrase_provider: PassphraseProvider,
        *,
        document_parser: DocumentParser = parse_mime_entity,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Load both key-rings and build the services.

        Args:
            config: Key-ring locations and message options.
            passphrase_provider: Supplies passphrases for secret keys.
            document_parser: Turns decrypted bytes into the returned entity.
            clock: Current time source used for key expiry checks.

        Raises:
            KeyRingError: If an existing key-ring file cannot be read.
        """
        self._config = config
        self._key_store = KeyStore.from_config(config)

        selector_options = {"expiry_policy": config.expiry_policy}
        if clock is not None:
            selector_options["clock"] = clock
        self._key_selector = KeySelector(self._key_store, **selector_options)

        self._verification = VerificationService(self._key_selector)
        self._signing = SigningService(passphrase_provider, compression=config.compression)
        self._encryption = EncryptionService(
            passphrase_provider,
            compression=config.compression,
            literal_filename=config.literal_filename,
        )
        self._decryption = DecryptionService(
            self._key_selector,
            self._verification,
            passphrase_provider,
            document_parser=document_parser,
        )
        self._key_exchange = KeyExchangeService(self._key_store, self._key_selector)
        logger.debug("Context initialized", public_keyring=str(config.public_keyring_path))

    @classmethod
    def from_directory(cls, directory: str, passphrase_provider: PassphraseProvider) -> Self:
        return cls(OpenPgpConfig.from_directory(directory), passphrase_provider)

    @property
    def config(self) -> OpenPgpConfig:
        return self._config

    @property
    def key_selector(self) -> KeySelector:
        return self._key_selector

    @property
    def public_key_ring_bundle(self) -> KeyRingBundle:
        return self._key_store.public_bundle

    @property
    def secret_key_ring_bundle(self) -> KeyRingBundle:
        return self._key_store.secret_bundle

    def supports(self, protocol: str) -> bool:
        """
        Check whether ``protocol`` is one this context handles.

        ``application/x-pgp-signature`` style names are accepted too.
        """
        if protocol is None:
            msg = "Protocol is required"
            raise InvalidArgumentError(msg)
        media_type, _, subtype = protocol.strip().lower().partition("/")
        subtype = subtype.removeprefix("x-")
        return f"{media_type}/{subtype}" in {
            self.signature_protocol,
            self.encryption_protocol,
            self.key_exchange_protocol,
        }

    def _signing_key(self, signer: Signer) -> pgpy.PGPKey:
        if isinstance(signer, str):
            return self._key_selector.select_signing_key(signer)
        return signer

    def _recipient_keys(self, recipients: Recipients) -> list[pgpy.PGPKey]:
        if recipients is None:
            msg = "Recipients are required"
            raise InvalidArgumentError(msg)
        if isinstance(recipients, (str, pgpy.PGPKey)):
            recipients = [recipients]
        return [
            self._key_selector.select_encryption_key(recipient)
            if isinstance(recipient, str)
            else recipient
            for recipient in recipients
        ]

    def sign(self, signer: Signer, digest: DigestAlgorithm, content: bytes) -> MimeAttachment:
        """
        Create a detached signature over ``content``.

        Args:
            signer: Secret key, or identity whose signing key is selected.
            digest: Digest algorithm for the signature.
            content: Bytes to sign.

        Returns:
            Armored signature framed as an ``application/pgp-signature`` part.

        Raises:
            CertificateNotFoundError: If the identity has no usable signing key.
            InvalidArgumentError: If the key cannot sign or an input is missing.
        """
        data = self._signing.sign(self._signing_key(signer), digest, content)
        return MimeAttachment(
            content_type=SIGNATURE_PROTOCOL, content=data, filename=SIGNATURE_FILENAME
        )

    def verify(self, content: bytes, signature_data: bytes | str) -> list[DigitalSignature]:
        """
        Verify a detached signature produced by ``sign``.

        Raises:
            UnexpectedPacketError: If ``signature_data`` holds no signature list.
        """
        if content is None or signature_data is None:
            msg = "Content and signature data are required"
            raise InvalidArgumentError(msg)
        return self._verification.verify_detached(bytes(content), signature_data)

    def encrypt(self, recipients: Recipients, content: bytes) -> MimeAttachment:
        """
        Encrypt ``content`` to every recipient.

        Args:
            recipients: Public keys, or identities whose encryption keys are selected.
            content: Bytes to encrypt.

        Raises:
            CertificateNotFoundError: If an identity has no usable key.
            InvalidArgumentError: If there are no recipients or one cannot encrypt.
        """
        data = self._encryption.encrypt(self._recipient_keys(recipients), content)
        return MimeAttachment(content_type=OCTET_STREAM, content=data, filename=ENCRYPTED_FILENAME)

    def sign_and_encrypt(
        self,
        signer: Signer,
        digest: DigestAlgorithm,
        recipients: Recipients,
        content: bytes,
    ) -> MimeAttachment:
        """
        Sign ``content`` and encrypt it, signature included, to every recipient.

        Raises:
            CertificateNotFoundError: If an identity has no usable key.
            InvalidArgumentError: If a key cannot play its role or an input is missing.
        """
        data = self._encryption.sign_and_encrypt(
            self._signing_key(signer), digest, self._recipient_keys(recipients), content
        )
        return MimeAttachment(content_type=OCTET_STREAM, content=data, filename=ENCRYPTED_FILENAME)

    def decrypt(self, encrypted: bytes | str) -> DecryptionResult:
        """Decrypt a message and verify any embedded signatures."""
        if encrypted is None:
            msg = "Encrypted data is required"
            raise InvalidArgumentError(msg)
        return self._decryption.decrypt(encrypted)

    def import_keys(self, data: bytes | str) -> int:
        """
        Import public key-rings and save the public key-ring file.

        Returns:
            Number of key-rings imported.
        """
        return self._key_exchange.import_keys(data)

    def export_keys(self, source: ExportSource) -> MimeAttachment:
        """
        Export public key-rings for identities, keys or a whole bundle.

        Returns:
            Armored key block framed as an ``application/pgp-keys`` part.
        """
        data = self._key_exchange.export_keys(source)
        return MimeAttachment(
            content_type=KEY_EXCHANGE_PROTOCOL, content=data, filename=KEYS_FILENAME
        )
