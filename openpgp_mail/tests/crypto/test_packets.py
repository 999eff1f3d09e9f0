import pgpy
import pytest
from pgpy.constants import CompressionAlgorithm, HashAlgorithm
from pgpy.packet.packets import Marker, SKEData

from openpgp_mail.crypto.layers import (
    encode_packets,
    encrypt_message,
    literal_message,
    literal_packet,
    sign_content,
    signature_packet,
)
from openpgp_mail.crypto.packets import (
    CompressedObject,
    EncryptedDataList,
    LiteralDataObject,
    PacketReader,
    PacketTag,
    PublicKeyEncryptedData,
)
from openpgp_mail.exceptions import IntegrityError, SessionKeyError, UnexpectedPacketError
from openpgp_mail.tests.constants import PASSPHRASE
from openpgp_mail.tests.keys import encryption_subkey


def marker_bytes() -> bytes:
    marker = Marker()
    marker.update_hlen()
    return bytes(marker.__bytearray__())


def encrypted_to(*recipients: pgpy.PGPKey, content: bytes = b"secret") -> bytes:
    message = literal_message(content, "mime.txt", CompressionAlgorithm.ZLIB)
    subkeys = [encryption_subkey(recipient.pubkey) for recipient in recipients]
    return bytes(encrypt_message(message, subkeys))


def test_literal_data_object_exposes_content_and_filename() -> None:
    data = encode_packets([literal_packet(b"\x00\xffbinary", "mime.txt")], CompressionAlgorithm.Uncompressed)

    obj = PacketReader.from_bytes(data).next_object()

    assert isinstance(obj, LiteralDataObject)
    assert obj.tag is PacketTag.LITERAL_DATA
    assert obj.content == b"\x00\xffbinary"
    assert obj.filename == "mime.txt"


def test_compressed_object_reads_inner_packets() -> None:
    data = encode_packets([literal_packet(b"hello", "mime.txt")], CompressionAlgorithm.ZLIB)
    reader = PacketReader.from_bytes(data)

    obj = reader.next_object()

    assert isinstance(obj, CompressedObject)
    assert obj.algorithm == CompressionAlgorithm.ZLIB
    assert obj.reader().next_object().content == b"hello"
    assert reader.next_object() is None


def test_marker_packet_is_its_own_object() -> None:
    data = marker_bytes() + encode_packets(
        [literal_packet(b"hello", "mime.txt")], CompressionAlgorithm.Uncompressed
    )

    tags = [obj.tag for obj in PacketReader.from_bytes(data)]

    assert tags == [PacketTag.MARKER, PacketTag.LITERAL_DATA]


def test_consecutive_signatures_form_one_list(alice_key: pgpy.PGPKey, bob_key: pgpy.PGPKey) -> None:
    signatures = []
    for key in (alice_key, bob_key):
        with key.unlock(PASSPHRASE):
            signatures.append(sign_content(key, b"hello", HashAlgorithm.SHA256))
    data = encode_packets(
        [signature_packet(signature) for signature in signatures],
        CompressionAlgorithm.Uncompressed,
    )
    reader = PacketReader.from_bytes(data)

    obj = reader.next_object()

    assert obj.tag is PacketTag.SIGNATURE_LIST
    assert len(obj) == 2
    assert [signature.signer for signature in obj] == [
        alice_key.fingerprint.keyid,
        bob_key.fingerprint.keyid,
    ]
    assert reader.next_object() is None


def test_session_keys_are_grouped_with_encrypted_data(
    alice_key: pgpy.PGPKey, bob_key: pgpy.PGPKey
) -> None:
    reader = PacketReader.from_bytes(encrypted_to(alice_key, bob_key))

    obj = reader.next_object()

    assert isinstance(obj, EncryptedDataList)
    assert len(obj.session_keys) == 2
    assert obj.data is not None
    assert {encrypted.key_id for encrypted in obj.public_key_encrypted()} == {
        encryption_subkey(alice_key).fingerprint.keyid,
        encryption_subkey(bob_key).fingerprint.keyid,
    }
    assert reader.next_object() is None


def test_decrypt_opens_compressed_layer(alice_key: pgpy.PGPKey) -> None:
    encrypted = PacketReader.from_bytes(encrypted_to(alice_key)).next_object()
    public_key_encrypted = encrypted.first_public_key_encrypted()

    with alice_key.unlock(PASSPHRASE):
        inner = public_key_encrypted.decrypt(encryption_subkey(alice_key))

    compressed = inner.next_object()
    assert compressed.tag is PacketTag.COMPRESSED_DATA
    assert compressed.reader().next_object().content == b"secret"


def test_decrypt_with_wrong_key_raises_session_key_error(
    alice_key: pgpy.PGPKey, bob_key: pgpy.PGPKey
) -> None:
    encrypted = PacketReader.from_bytes(encrypted_to(alice_key)).next_object()

    with bob_key.unlock(PASSPHRASE), pytest.raises(SessionKeyError):
        encrypted.first_public_key_encrypted().decrypt(encryption_subkey(bob_key))


def test_decrypt_tampered_data_raises_integrity_error(alice_key: pgpy.PGPKey) -> None:
    data = bytearray(encrypted_to(alice_key))
    data[-1] ^= 0x01
    encrypted = PacketReader.from_bytes(data).next_object()

    with alice_key.unlock(PASSPHRASE), pytest.raises(IntegrityError):
        encrypted.first_public_key_encrypted().decrypt(encryption_subkey(alice_key))


def test_decrypt_rejects_data_without_integrity_protection(alice_key: pgpy.PGPKey) -> None:
    encrypted = PacketReader.from_bytes(encrypted_to(alice_key)).next_object()
    unprotected = PublicKeyEncryptedData(encrypted.session_keys[0], SKEData())

    with pytest.raises(IntegrityError, match="not integrity protected"):
        unprotected.decrypt(alice_key)


def test_decrypt_without_encrypted_data_raises(alice_key: pgpy.PGPKey) -> None:
    encrypted = PacketReader.from_bytes(encrypted_to(alice_key)).next_object()
    orphaned = PublicKeyEncryptedData(encrypted.session_keys[0], None)

    with pytest.raises(UnexpectedPacketError, match="not followed by encrypted data"):
        orphaned.decrypt(alice_key)


def test_from_armored_accepts_armored_messages(alice_key: pgpy.PGPKey) -> None:
    message = literal_message(b"secret", "mime.txt", CompressionAlgorithm.ZLIB)
    armored = str(encrypt_message(message, [encryption_subkey(alice_key.pubkey)]))

    obj = PacketReader.from_armored(armored).next_object()

    assert obj.tag is PacketTag.ENCRYPTED_DATA_LIST
