from openpgp_mail.exceptions import (
    CertificateNotFoundError,
    CryptoError,
    KeyRingError,
    KeyUnlockError,
    OpenPgpError,
    RecursiveCompressionError,
    UnexpectedPacketError,
)


def test_openpgp_error_str_without_context() -> None:
    error = OpenPgpError("Something failed")

    assert str(error) == "Something failed"


def test_openpgp_error_str_with_context() -> None:
    error = OpenPgpError("Failed", key_id="ABCD", attempt=3)

    assert "Failed" in str(error)
    assert "key_id='ABCD'" in str(error)
    assert "attempt=3" in str(error)


def test_certificate_not_found_error_keeps_identity() -> None:
    error = CertificateNotFoundError("No valid public key found", identity="a@example.com")

    assert error.identity == "a@example.com"
    assert error.key_id is None
    assert "identity='a@example.com'" in str(error)


def test_key_ring_error_keeps_path() -> None:
    error = KeyRingError("Failed to save key-ring", path="/tmp/pubring.gpg")

    assert error.path == "/tmp/pubring.gpg"


def test_crypto_errors_share_base_classes() -> None:
    assert issubclass(KeyUnlockError, CryptoError)
    assert issubclass(UnexpectedPacketError, CryptoError)
    assert issubclass(RecursiveCompressionError, CryptoError)
    assert issubclass(CryptoError, OpenPgpError)
    assert issubclass(KeyRingError, OpenPgpError)
