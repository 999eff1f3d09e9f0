"""
Builders for the outbound packet layers.

Outbound messages nest as armor, then encryption, then compression, then
literal data. pgpy serializes a message inner layer first, so every layer
is complete before the one wrapping it is produced and nothing half-written
escapes a failure.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

import pgpy
from pgpy.constants import (
    CompressionAlgorithm,
    HashAlgorithm,
    SignatureType,
    SymmetricKeyAlgorithm,
)
from pgpy.errors import PGPError
from pgpy.packet import Packet
from pgpy.packet.packets import CompressedData, LiteralData

from openpgp_mail.exceptions import CryptoError

SESSION_CIPHER = SymmetricKeyAlgorithm.AES256


def literal_packet(content: bytes, filename: str) -> LiteralData:
    """Binary literal data packet holding ``content`` unchanged."""
    literal = LiteralData()
    literal._contents = bytearray(content)
    literal.filename = filename
    literal.mtime = datetime.now(UTC)
    literal.format = "b"
    literal.update_hlen()
    return literal


def literal_message(
    content: bytes, filename: str, compression: CompressionAlgorithm
) -> pgpy.PGPMessage:
    """Unencrypted message of one literal packet, compressed on serialization."""
    message = pgpy.PGPMessage() | literal_packet(content, filename)
    message._compression = compression
    return message


def encode_packets(packets: Iterable[Packet], compression: CompressionAlgorithm) -> bytes:
    """Serialize ``packets``, inside a compressed data packet unless uncompressed."""
    packets = list(packets)
    if compression == CompressionAlgorithm.Uncompressed:
        return b"".join(bytes(packet.__bytearray__()) for packet in packets)
    compressed = CompressedData()
    compressed.calg = compression
    compressed.packets = packets
    compressed.update_hlen()
    return bytes(compressed.__bytearray__())


def signature_packet(signature: pgpy.PGPSignature) -> Packet:
    return Packet(bytearray(bytes(signature)))


def sign_content(
    key: pgpy.PGPKey,
    content: bytes,
    hash_algorithm: HashAlgorithm,
    *,
    signer_user_id: str | None = None,
) -> pgpy.PGPSignature:
    """
    Sign ``content`` with an unlocked secret key.

    The result is a canonical text signature over the raw bytes whatever
    their charset, so line ending changes in transit do not break it.

    Args:
        key: Unlocked, signing-capable secret key.
        content: Bytes to sign.
        hash_algorithm: Engine hash to sign with.
        signer_user_id: User id search string recorded as the signer's user id.

    Raises:
        CryptoError: If the engine fails to sign.
    """
    key_id = key.fingerprint.keyid
    if key.is_public or not key.is_unlocked:
        msg = "Failed to sign content: secret key is not unlocked"
        raise CryptoError(msg, key_id=key_id)

    # pgpy only makes text signatures of str subjects, which it re-encodes as UTF-8.
    signature = pgpy.PGPSignature.new(
        SignatureType.CanonicalDocument, key.key_algorithm, hash_algorithm, key_id
    )
    options = {}
    if signer_user_id:
        options["user"] = signer_user_id
    try:
        return key._sign(bytes(content), signature, **options)
    except (PGPError, NotImplementedError, ValueError) as e:
        msg = f"Failed to sign content: {e}"
        raise CryptoError(msg) from e


def encrypt_message(
    message: pgpy.PGPMessage, recipients: Iterable[pgpy.PGPKey]
) -> pgpy.PGPMessage:
    """
    Encrypt ``message`` once, with its session key wrapped for every recipient.

    Raises:
        CryptoError: If the engine fails to encrypt.
    """
    session_key = SESSION_CIPHER.gen_key()
    try:
        for recipient in recipients:
            message = recipient.encrypt(message, cipher=SESSION_CIPHER, sessionkey=session_key)
    except (PGPError, NotImplementedError, ValueError) as e:
        msg = f"Failed to encrypt message: {e}"
        raise CryptoError(msg) from e
    finally:
        del session_key
    return message
