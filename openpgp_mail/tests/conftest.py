from collections.abc import Callable
from pathlib import Path

import pgpy
import pytest

from openpgp_mail.config import OpenPgpConfig
from openpgp_mail.context import OpenPgpContext
from openpgp_mail.crypto.key_selector import KeySelector
from openpgp_mail.crypto.key_store import KeyStore
from openpgp_mail.crypto.keyring import KeyRingBundle
from openpgp_mail.crypto.passphrase import StaticPassphraseProvider
from openpgp_mail.tests.constants import ALICE, BOB, CAROL, DAVE, EVE, MALLORY, PASSPHRASE
from openpgp_mail.tests.keys import build_key


@pytest.fixture(scope="session")
def alice_key() -> pgpy.PGPKey:
    return build_key("Alice", ALICE)


@pytest.fixture(scope="session")
def bob_key() -> pgpy.PGPKey:
    return build_key("Bob", BOB)


@pytest.fixture(scope="session")
def carol_key() -> pgpy.PGPKey:
    """Signing only, no encryption subkey."""
    return build_key("Carol", CAROL, encrypt=False)


@pytest.fixture(scope="session")
def dave_key() -> pgpy.PGPKey:
    """Encryption subkey revoked."""
    return build_key("Dave", DAVE, revoke_subkey=True)


@pytest.fixture(scope="session")
def eve_key() -> pgpy.PGPKey:
    """Whole key revoked."""
    return build_key("Eve", EVE, revoke=True)


@pytest.fixture(scope="session")
def mallory_key() -> pgpy.PGPKey:
    """Not present in any key-ring."""
    return build_key("Mallory", MALLORY)


@pytest.fixture
def public_bundle(
    alice_key: pgpy.PGPKey,
    bob_key: pgpy.PGPKey,
    carol_key: pgpy.PGPKey,
    dave_key: pgpy.PGPKey,
    eve_key: pgpy.PGPKey,
) -> KeyRingBundle:
    return KeyRingBundle(
        key.pubkey for key in (alice_key, bob_key, carol_key, dave_key, eve_key)
    )


@pytest.fixture
def secret_bundle(
    alice_key: pgpy.PGPKey,
    bob_key: pgpy.PGPKey,
    carol_key: pgpy.PGPKey,
    eve_key: pgpy.PGPKey,
) -> KeyRingBundle:
    return KeyRingBundle([alice_key, bob_key, carol_key, eve_key])


@pytest.fixture
def config(tmp_path: Path, public_bundle: KeyRingBundle, secret_bundle: KeyRingBundle) -> OpenPgpConfig:
    config = OpenPgpConfig.from_directory(tmp_path / "gnupg")
    config.public_keyring_path.parent.mkdir()
    config.public_keyring_path.write_bytes(public_bundle.encode())
    config.secret_keyring_path.write_bytes(secret_bundle.encode())
    return config


@pytest.fixture
def key_store(config: OpenPgpConfig) -> KeyStore:
    return KeyStore.from_config(config)


@pytest.fixture
def key_selector(key_store: KeyStore) -> KeySelector:
    return KeySelector(key_store)


@pytest.fixture
def passphrase_provider() -> StaticPassphraseProvider:
    return StaticPassphraseProvider(PASSPHRASE)


@pytest.fixture
def make_context(
    config: OpenPgpConfig, passphrase_provider: StaticPassphraseProvider
) -> Callable[..., OpenPgpContext]:
    def _make(**options: object) -> OpenPgpContext:
        return OpenPgpContext(config, passphrase_provider, **options)

    return _make
