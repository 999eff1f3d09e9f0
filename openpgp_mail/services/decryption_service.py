"""
Decryption of inbound encrypted messages.
"""

from collections.abc import Callable
from email import message_from_bytes, policy
from typing import Any, TypeAlias

import structlog

from openpgp_mail.crypto.key_selector import KeySelector
from openpgp_mail.crypto.packets import (
    EncryptedDataList,
    PacketReader,
    PacketTag,
    SignatureList,
)
from openpgp_mail.crypto.passphrase import PassphraseProvider
from openpgp_mail.exceptions import (
    NoEncryptedDataError,
    RecursiveCompressionError,
    UnexpectedPacketError,
)
from openpgp_mail.models.signatures import DecryptionResult
from openpgp_mail.services.verification_service import VerificationService

logger = structlog.get_logger(__name__)

DocumentParser: TypeAlias = Callable[[bytes], Any]


def parse_mime_entity(content: bytes) -> Any:
    return message_from_bytes(content, policy=policy.default)


def read_encrypted_list(reader: PacketReader) -> EncryptedDataList:
    """
    Read the encrypted data list, skipping at most one leading object.

    Raises:
        UnexpectedPacketError: If neither of the first two objects is one.
    """
    obj = reader.next_object()
    if obj is not None and obj.tag is not PacketTag.ENCRYPTED_DATA_LIST:
        obj = reader.next_object()
    if obj is None or obj.tag is not PacketTag.ENCRYPTED_DATA_LIST:
        msg = "Unexpected pgp object"
        raise UnexpectedPacketError(msg, packet=obj.tag if obj is not None else None)
    return obj


def read_plaintext(reader: PacketReader) -> tuple[bytes, SignatureList | None]:
    """
    Walk the decrypted packets and collect literal data and signatures.

    At most one compressed layer is opened; its packets replace the rest of
    the stream.

    Returns:
        The concatenated literal data and the trailing signature list, if any.

    Raises:
        RecursiveCompressionError: If a compressed layer holds another one.
    """
    content = bytearray()
    signatures: SignatureList | None = None
    compressed = False

    while (obj := reader.next_object()) is not None:
        match obj.tag:
            case PacketTag.COMPRESSED_DATA:
                if compressed:
                    msg = "Recursive compression packets are not supported"
                    raise RecursiveCompressionError(msg)
                compressed = True
                reader = obj.reader()
            case PacketTag.ONE_PASS_SIGNATURE_LIST:
                logger.debug("One-pass signatures present", count=len(obj))
            case PacketTag.SIGNATURE_LIST:
                signatures = obj
            case PacketTag.LITERAL_DATA:
                content += obj.content
            case _:
                logger.debug("Skipping packet", packet=str(obj.tag))

    return bytes(content), signatures


class DecryptionService:
    """
    Decrypts messages addressed to keys of the secret bundle.
    """

    def __init__(
        self,
        key_selector: KeySelector,
        verification: VerificationService,
        passphrase_provider: PassphraseProvider,
        *,
        document_parser: DocumentParser = parse_mime_entity,
    ) -> None:
        """
        Args:
            key_selector: Resolves the recipient's secret key.
            verification: Verifies embedded signatures.
            passphrase_provider: Unlocks the recipient's secret key.
            document_parser: Turns the plaintext into the returned entity.
        """
        self._key_selector = key_selector
        self._verification = verification
        self._passphrase_provider = passphrase_provider
        self._document_parser = document_parser

    def decrypt(self, encrypted: bytes | str) -> DecryptionResult:
        """
        Decrypt a message and verify any signatures it carries.

        Args:
            encrypted: ASCII-armored or binary encrypted message.

        Returns:
            Parsed entity, plaintext bytes and one result per signature.

        Raises:
            UnexpectedPacketError: If the input is not an encrypted message.
            NoEncryptedDataError: If no session key is public-key encrypted.
            CertificateNotFoundError: If no secret key matches the recipient.
            KeyUnlockError: If the secret key cannot be unlocked.
            SessionKeyError: If the session key cannot be recovered.
            IntegrityError: If the data was modified.
            RecursiveCompressionError: If compressed layers are nested.
        """
        encrypted_list = read_encrypted_list(PacketReader.from_armored(encrypted))
        encrypted_data = encrypted_list.first_public_key_encrypted()
        if encrypted_data is None:
            msg = "No public key encrypted data found"
            raise NoEncryptedDataError(msg)

        key_id = encrypted_data.key_id
        logger.debug("Decrypting message", key_id=key_id)
        with self._key_selector.select_private_key(key_id, self._passphrase_provider) as key:
            inner = encrypted_data.decrypt(key)

        content, signature_list = read_plaintext(inner)
        signatures = []
        if signature_list is not None:
            signatures = self._verification.verify_signatures(signature_list.signatures, content)

        return DecryptionResult(
            entity=self._document_parser(content),
            content=content,
            signatures=signatures,
        )
