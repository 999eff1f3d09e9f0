"""
Packet object stream.

Groups pgpy packets into the objects a message reader works with: an
encrypted data list is the run of session key packets plus the encrypted
data packet that follows them, a signature list is a run of consecutive
signature packets, and so on. Each object carries a ``tag`` so readers can
``match`` on it.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar, Self, TypeAlias

import pgpy
import structlog
from cryptography.hazmat.primitives.keywrap import InvalidUnwrap
from pgpy.constants import CompressionAlgorithm
from pgpy.errors import PGPError
from pgpy.packet import Packet
from pgpy.packet.packets import (
    CompressedData,
    IntegrityProtectedSKEData,
    LiteralData,
    Marker,
    OnePassSignature,
    PKESessionKey,
    Signature,
    SKEData,
    SKESessionKey,
)

from openpgp_mail.crypto.armor import unarmor
from openpgp_mail.exceptions import (
    IntegrityError,
    SessionKeyError,
    UnexpectedPacketError,
)

logger = structlog.get_logger(__name__)


class PacketTag(StrEnum):
    MARKER = "marker"
    ENCRYPTED_DATA_LIST = "encrypted-data-list"
    COMPRESSED_DATA = "compressed-data"
    ONE_PASS_SIGNATURE_LIST = "one-pass-signature-list"
    SIGNATURE_LIST = "signature-list"
    LITERAL_DATA = "literal-data"
    OTHER = "other"


@dataclass(frozen=True)
class MarkerObject:
    tag: ClassVar[PacketTag] = PacketTag.MARKER

    packet: Marker


@dataclass(frozen=True)
class PublicKeyEncryptedData:
    """A session key encrypted to one public key, paired with the data it unlocks."""

    session_key: PKESessionKey
    data: IntegrityProtectedSKEData | SKEData | None

    @property
    def key_id(self) -> str:
        return self.session_key.encrypter

    def decrypt(self, private_key: pgpy.PGPKey) -> "PacketReader":
        """
        Recover the session key and open the encrypted data.

        Args:
            private_key: Unlocked secret key whose key id matches ``key_id``.

        Returns:
            Reader over the decrypted inner packets.

        Raises:
            UnexpectedPacketError: If no encrypted data follows the session keys.
            SessionKeyError: If the session key cannot be decrypted.
            IntegrityError: If the data is not integrity protected or fails its check.
        """
        if self.data is None:
            msg = "Session keys are not followed by encrypted data"
            raise UnexpectedPacketError(msg, packet=PacketTag.ENCRYPTED_DATA_LIST)
        if not isinstance(self.data, IntegrityProtectedSKEData):
            msg = "Encrypted data is not integrity protected"
            raise IntegrityError(msg)

        try:
            algorithm, session_key = self.session_key.decrypt_sk(private_key._key)
        except (PGPError, InvalidUnwrap, NotImplementedError, ValueError) as e:
            msg = f"Failed to decrypt session key: {e}"
            raise SessionKeyError(msg) from e

        try:
            plaintext = self.data.decrypt(session_key, algorithm)
        except (PGPError, ValueError) as e:
            msg = "Encrypted data failed its integrity check"
            raise IntegrityError(msg) from e
        finally:
            del session_key

        logger.debug("Opened encrypted data", key_id=self.key_id, algorithm=algorithm.name)
        return PacketReader.from_bytes(plaintext)


@dataclass(frozen=True)
class EncryptedDataList:
    tag: ClassVar[PacketTag] = PacketTag.ENCRYPTED_DATA_LIST

    session_keys: tuple[PKESessionKey | SKESessionKey, ...]
    data: IntegrityProtectedSKEData | SKEData | None

    def public_key_encrypted(self) -> Iterator[PublicKeyEncryptedData]:
        for session_key in self.session_keys:
            if isinstance(session_key, PKESessionKey):
                yield PublicKeyEncryptedData(session_key, self.data)

    def first_public_key_encrypted(self) -> PublicKeyEncryptedData | None:
        return next(self.public_key_encrypted(), None)


@dataclass(frozen=True)
class CompressedObject:
    tag: ClassVar[PacketTag] = PacketTag.COMPRESSED_DATA

    packet: CompressedData

    @property
    def algorithm(self) -> CompressionAlgorithm:
        return self.packet.calg

    def reader(self) -> "PacketReader":
        """Reader over the decompressed packets."""
        return PacketReader(self.packet.packets)


@dataclass(frozen=True)
class OnePassSignatureList:
    tag: ClassVar[PacketTag] = PacketTag.ONE_PASS_SIGNATURE_LIST

    packets: tuple[OnePassSignature, ...]

    def __len__(self) -> int:
        return len(self.packets)


@dataclass(frozen=True)
class SignatureList:
    tag: ClassVar[PacketTag] = PacketTag.SIGNATURE_LIST

    signatures: tuple[pgpy.PGPSignature, ...]

    def __len__(self) -> int:
        return len(self.signatures)

    def __iter__(self) -> Iterator[pgpy.PGPSignature]:
        return iter(self.signatures)


@dataclass(frozen=True)
class LiteralDataObject:
    tag: ClassVar[PacketTag] = PacketTag.LITERAL_DATA

    packet: LiteralData

    @property
    def filename(self) -> str:
        return self.packet.filename

    @property
    def content(self) -> bytes:
        """Literal bytes exactly as stored, whatever the format marker."""
        contents = self.packet.contents
        if isinstance(contents, str):
            encoding = "latin-1" if self.packet.format == "t" else "utf-8"
            return contents.encode(encoding)
        return bytes(contents)


@dataclass(frozen=True)
class OpaqueObject:
    tag: ClassVar[PacketTag] = PacketTag.OTHER

    packet: Packet


PacketObject: TypeAlias = (
    MarkerObject
    | EncryptedDataList
    | CompressedObject
    | OnePassSignatureList
    | SignatureList
    | LiteralDataObject
    | OpaqueObject
)


def _parse_packets(stream: bytearray) -> Iterator[Packet]:
    while len(stream) > 0:
        try:
            packet = Packet(stream)
        except Exception as e:
            msg = f"Malformed packet: {e}"
            raise UnexpectedPacketError(msg) from e
        yield packet


class PacketReader:
    """
    Sequential reader of packet objects with one packet of lookahead.

    Objects are produced lazily and strictly in stream order.
    """

    def __init__(self, packets: Iterable[Packet]) -> None:
        self._packets = iter(packets)
        self._pending: Packet | None = None

    @classmethod
    def from_bytes(cls, data: bytes | bytearray) -> Self:
        """Reader over a binary packet stream."""
        return cls(_parse_packets(bytearray(data)))

    @classmethod
    def from_armored(cls, data: bytes | bytearray | str) -> Self:
        """Reader over ASCII-armored or binary input."""
        return cls(_parse_packets(unarmor(data)))

    def __iter__(self) -> Iterator[PacketObject]:
        while (obj := self.next_object()) is not None:
            yield obj

    def _peek(self) -> Packet | None:
        if self._pending is None:
            self._pending = next(self._packets, None)
        return self._pending

    def _take(self) -> Packet | None:
        packet = self._peek()
        self._pending = None
        return packet

    def _take_run(self, packet_type: type | tuple[type, ...]) -> list[Packet]:
        run = []
        while isinstance(self._peek(), packet_type):
            run.append(self._take())
        return run

    def next_object(self) -> PacketObject | None:
        """Return the next object, or None when the stream is exhausted."""
        packet = self._peek()
        match packet:
            case None:
                return None
            case Marker():
                return MarkerObject(self._take())
            case PKESessionKey() | SKESessionKey():
                session_keys = self._take_run((PKESessionKey, SKESessionKey))
                data = self._take() if isinstance(self._peek(), (IntegrityProtectedSKEData, SKEData)) else None
                return EncryptedDataList(tuple(session_keys), data)
            case IntegrityProtectedSKEData() | SKEData():
                return EncryptedDataList((), self._take())
            case CompressedData():
                return CompressedObject(self._take())
            case OnePassSignature():
                return OnePassSignatureList(tuple(self._take_run(OnePassSignature)))
            case Signature():
                signatures = self._take_run(Signature)
                return SignatureList(tuple(pgpy.PGPSignature() | sig for sig in signatures))
            case LiteralData():
                return LiteralDataObject(self._take())
            case _:
                return OpaqueObject(self._take())
