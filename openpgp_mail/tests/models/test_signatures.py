from datetime import UTC, datetime

from openpgp_mail.models.crypto import DigestAlgorithm, PublicKeyAlgorithm
from openpgp_mail.models.signatures import (
    DecryptionResult,
    DigitalSignature,
    SignatureError,
    SignatureStatus,
)


def make_signature(**overrides: object) -> DigitalSignature:
    values = {
        "key_id": "0123456789ABCDEF",
        "public_key_algorithm": PublicKeyAlgorithm.EDWARDS_CURVE_DSA,
        "digest_algorithm": DigestAlgorithm.SHA256,
        "creation_date": datetime(2024, 1, 1, tzinfo=UTC),
        "status": SignatureStatus.GOOD,
    }
    values.update(overrides)
    return DigitalSignature(**values)


def test_good_signature_is_verified() -> None:
    signature = make_signature()

    assert signature.verified
    assert signature.errors == SignatureError.NONE


def test_error_signature_is_not_verified() -> None:
    signature = make_signature(
        status=SignatureStatus.ERROR, errors=SignatureError.NO_PUBLIC_KEY
    )

    assert not signature.verified
    assert SignatureError.NO_PUBLIC_KEY in signature.errors


def test_signature_errors_combine_as_flags() -> None:
    errors = SignatureError.NO_PUBLIC_KEY | SignatureError.UNSUPPORTED_ALGORITHM

    assert SignatureError.UNSUPPORTED_ALGORITHM in errors
    assert int(errors) == 3


def test_decryption_result_defaults_to_no_signatures() -> None:
    result = DecryptionResult(entity=None, content=b"hello")

    assert result.signatures == []
