from unittest.mock import patch

import pgpy
import pytest

from openpgp_mail.crypto.key_store import KeyStore, backup_path
from openpgp_mail.crypto.keyring import KeyRingBundle
from openpgp_mail.exceptions import CertificateNotFoundError, InvalidArgumentError, KeyRingError
from openpgp_mail.services.key_exchange_service import KeyExchangeService
from openpgp_mail.tests.constants import ALICE, BOB, CAROL, MALLORY
from openpgp_mail.tests.keys import build_key, encryption_subkey


def test_import_keys_appends_new_ring_and_saves(
    key_exchange_service: KeyExchangeService, key_store: KeyStore, mallory_key: pgpy.PGPKey
) -> None:
    count = key_exchange_service.import_keys(KeyRingBundle([mallory_key.pubkey]).armor())

    assert count == 1
    assert len(key_store.public_bundle) == 6
    assert key_store.public_bundle.get_key_rings(MALLORY)[0].fingerprint == mallory_key.fingerprint
    reloaded = KeyRingBundle.parse(key_store.public_keyring_path.read_bytes())
    assert len(reloaded) == 6
    assert backup_path(key_store.public_keyring_path).exists()


def test_import_keys_stores_public_half_of_secret_rings(
    key_exchange_service: KeyExchangeService, key_store: KeyStore
) -> None:
    secret = build_key("Frank", "frank@example.com", passphrase=None)

    key_exchange_service.import_keys(KeyRingBundle([secret]).encode())

    [ring] = key_store.public_bundle.get_key_rings("frank@example.com")
    assert ring.is_public
    reloaded = KeyRingBundle.parse(key_store.public_keyring_path.read_bytes())
    assert all(ring.is_public for ring in reloaded)


def test_import_keys_replaces_ring_with_same_primary(
    key_exchange_service: KeyExchangeService, key_store: KeyStore, alice_key: pgpy.PGPKey
) -> None:
    position = [ring.fingerprint for ring in key_store.public_bundle].index(alice_key.fingerprint)

    count = key_exchange_service.import_keys(bytes(alice_key.pubkey))

    assert count == 1
    fingerprints = [ring.fingerprint for ring in key_store.public_bundle]
    assert len(fingerprints) == 5
    assert fingerprints[position] == alice_key.fingerprint


@pytest.mark.parametrize(
    "data", [b"", KeyRingBundle().armor(), KeyRingBundle().armor().decode("ascii")]
)
def test_import_without_rings_writes_nothing(
    key_exchange_service: KeyExchangeService, key_store: KeyStore, data: bytes | str
) -> None:
    before = key_store.public_keyring_path.read_bytes()

    assert key_exchange_service.import_keys(data) == 0

    assert key_store.public_keyring_path.read_bytes() == before
    assert not backup_path(key_store.public_keyring_path).exists()


def test_import_keys_requires_data(key_exchange_service: KeyExchangeService) -> None:
    with pytest.raises(InvalidArgumentError, match="Key data is required"):
        key_exchange_service.import_keys(None)


def test_import_keys_failed_save_keeps_bundle(
    key_exchange_service: KeyExchangeService, key_store: KeyStore, mallory_key: pgpy.PGPKey
) -> None:
    previous = key_store.public_bundle

    with patch("openpgp_mail.crypto.key_store.os.replace", side_effect=OSError("read-only")):
        with pytest.raises(KeyRingError):
            key_exchange_service.import_keys(bytes(mallory_key.pubkey))

    assert key_store.public_bundle is previous
    assert not key_store.public_bundle.get_key_rings(MALLORY)


def test_export_bundle_by_identity_exports_whole_public_ring(
    key_exchange_service: KeyExchangeService, alice_key: pgpy.PGPKey
) -> None:
    bundle = key_exchange_service.export_bundle([ALICE])

    [ring] = bundle
    assert ring.fingerprint == alice_key.fingerprint
    assert ring.is_public
    assert encryption_subkey(alice_key).fingerprint.keyid in ring.subkeys


def test_export_bundle_deduplicates_rings(
    key_exchange_service: KeyExchangeService, alice_key: pgpy.PGPKey, bob_key: pgpy.PGPKey
) -> None:
    bundle = key_exchange_service.export_bundle(
        [ALICE, alice_key, encryption_subkey(alice_key), BOB, bob_key.pubkey]
    )

    assert [ring.fingerprint for ring in bundle] == [alice_key.fingerprint, bob_key.fingerprint]
    assert all(ring.is_public for ring in bundle)


def test_export_bundle_accepts_single_identity_and_whole_bundle(
    key_exchange_service: KeyExchangeService, key_store: KeyStore
) -> None:
    assert len(key_exchange_service.export_bundle(BOB)) == 1
    assert len(key_exchange_service.export_bundle(key_store.secret_bundle)) == 4


def test_export_bundle_unknown_identity_raises(key_exchange_service: KeyExchangeService) -> None:
    with pytest.raises(CertificateNotFoundError):
        key_exchange_service.export_bundle([CAROL])


def test_export_bundle_requires_source(key_exchange_service: KeyExchangeService) -> None:
    with pytest.raises(InvalidArgumentError, match="Keys to export are required"):
        key_exchange_service.export_bundle(None)


def test_export_keys_returns_armored_key_block(
    key_exchange_service: KeyExchangeService, alice_key: pgpy.PGPKey
) -> None:
    armored = key_exchange_service.export_keys([ALICE])

    assert armored.startswith(b"-----BEGIN PGP PUBLIC KEY BLOCK-----")
    [ring] = KeyRingBundle.parse(armored)
    assert ring.fingerprint == alice_key.fingerprint


def test_export_of_empty_bundle_imports_as_nothing(
    key_exchange_service: KeyExchangeService, key_store: KeyStore
) -> None:
    exported = key_exchange_service.export_keys(KeyRingBundle())

    assert key_exchange_service.import_keys(exported) == 0
    assert not backup_path(key_store.public_keyring_path).exists()
