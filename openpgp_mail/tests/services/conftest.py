from collections.abc import Callable

import pytest
from pgpy.constants import CompressionAlgorithm

from openpgp_mail.crypto.key_selector import KeySelector
from openpgp_mail.crypto.key_store import KeyStore
from openpgp_mail.crypto.passphrase import StaticPassphraseProvider
from openpgp_mail.services.decryption_service import DecryptionService
from openpgp_mail.services.encryption_service import EncryptionService
from openpgp_mail.services.key_exchange_service import KeyExchangeService
from openpgp_mail.services.signing_service import SigningService
from openpgp_mail.services.verification_service import VerificationService


@pytest.fixture
def verification_service(key_selector: KeySelector) -> VerificationService:
    return VerificationService(key_selector)


@pytest.fixture
def make_signing_service(
    passphrase_provider: StaticPassphraseProvider,
) -> Callable[..., SigningService]:
    def _make(compression: CompressionAlgorithm = CompressionAlgorithm.ZLIB) -> SigningService:
        return SigningService(passphrase_provider, compression=compression)

    return _make


@pytest.fixture
def make_encryption_service(
    passphrase_provider: StaticPassphraseProvider,
) -> Callable[..., EncryptionService]:
    def _make(
        compression: CompressionAlgorithm = CompressionAlgorithm.ZLIB,
        literal_filename: str = "mime.txt",
    ) -> EncryptionService:
        return EncryptionService(
            passphrase_provider, compression=compression, literal_filename=literal_filename
        )

    return _make


@pytest.fixture
def make_decryption_service(
    key_selector: KeySelector,
    verification_service: VerificationService,
    passphrase_provider: StaticPassphraseProvider,
) -> Callable[..., DecryptionService]:
    def _make(document_parser: Callable[[bytes], object] = bytes) -> DecryptionService:
        return DecryptionService(
            key_selector,
            verification_service,
            passphrase_provider,
            document_parser=document_parser,
        )

    return _make


@pytest.fixture
def key_exchange_service(key_store: KeyStore, key_selector: KeySelector) -> KeyExchangeService:
    return KeyExchangeService(key_store, key_selector)
