"""
Signature verification against the public key-ring.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

import pgpy
import structlog
from pgpy.errors import PGPError

from openpgp_mail.crypto.algorithms import (
    is_computable,
    try_digest_algorithm,
    try_public_key_algorithm,
)
from openpgp_mail.crypto.key_selector import KeySelector
from openpgp_mail.crypto.packets import PacketReader, PacketTag
from openpgp_mail.exceptions import UnexpectedPacketError
from openpgp_mail.models.signatures import DigitalSignature, SignatureError, SignatureStatus

logger = structlog.get_logger(__name__)


def _created(signature: pgpy.PGPSignature) -> datetime | None:
    created = signature.created
    if created is None:
        return None
    if created.tzinfo is None:
        return created.replace(tzinfo=UTC)
    return created


class VerificationService:
    """Verifies signature packets with keys from the public bundle."""

    def __init__(self, key_selector: KeySelector) -> None:
        """
        Args:
            key_selector: Resolves signer key ids to public keys.
        """
        self._key_selector = key_selector

    def verify_signatures(
        self, signatures: Iterable[pgpy.PGPSignature], content: bytes
    ) -> list[DigitalSignature]:
        """
        Verify each signature over ``content``.

        A missing signer key or unsupported algorithm degrades that one result
        to ``SignatureStatus.ERROR``; the rest of the batch is still checked.

        Returns:
            One result per signature, in input order.
        """
        content = bytes(content)
        return [self._verify_one(signature, content) for signature in signatures]

    def _verify_one(self, signature: pgpy.PGPSignature, content: bytes) -> DigitalSignature:
        key_id = signature.signer
        details = {
            "key_id": key_id,
            "public_key_algorithm": try_public_key_algorithm(signature.key_algorithm),
            "digest_algorithm": try_digest_algorithm(signature.hash_algorithm),
            "creation_date": _created(signature),
        }

        public_key = self._key_selector.get_public_key(key_id)
        if public_key is None:
            logger.warning("No public key for signature", key_id=key_id)
            return DigitalSignature(
                **details, status=SignatureStatus.ERROR, errors=SignatureError.NO_PUBLIC_KEY
            )

        unsupported = DigitalSignature(
            **details,
            public_key=public_key,
            status=SignatureStatus.ERROR,
            errors=SignatureError.UNSUPPORTED_ALGORITHM,
        )
        if not is_computable(signature.hash_algorithm):
            logger.warning(
                "Unsupported signature hash", key_id=key_id, hash=signature.hash_algorithm.name
            )
            return unsupported

        try:
            verified = bool(public_key.verify(content, signature))
        except NotImplementedError:
            logger.warning("Unsupported signature algorithm", key_id=key_id)
            return unsupported
        except PGPError as e:
            logger.warning("Signature check failed", key_id=key_id, error_type=type(e).__name__)
            verified = False

        logger.debug("Verified signature", key_id=key_id, verified=verified)
        return DigitalSignature(
            **details,
            public_key=public_key,
            status=SignatureStatus.GOOD if verified else SignatureStatus.BAD,
        )

    def verify_detached(self, content: bytes, signature_data: bytes | str) -> list[DigitalSignature]:
        """
        Verify a detached signature container over ``content``.

        The container holds a signature list, optionally inside one
        compressed layer.

        Raises:
            UnexpectedPacketError: If the container holds anything else.
        """
        reader = PacketReader.from_armored(signature_data)
        obj = reader.next_object()
        if obj is not None and obj.tag is PacketTag.COMPRESSED_DATA:
            obj = obj.reader().next_object()
        if obj is None or obj.tag is not PacketTag.SIGNATURE_LIST:
            msg = "Unexpected pgp object"
            raise UnexpectedPacketError(msg, packet=obj.tag if obj is not None else None)
        return self.verify_signatures(obj.signatures, content)
