import pytest

from openpgp_mail.models.crypto import PublicKeyAlgorithmTag


@pytest.mark.parametrize(
    ("tag", "can_sign", "can_encrypt"),
    [
        (PublicKeyAlgorithmTag.RSA_ENCRYPT_OR_SIGN, True, True),
        (PublicKeyAlgorithmTag.RSA_SIGN_ONLY, True, False),
        (PublicKeyAlgorithmTag.ELGAMAL_ENCRYPT_ONLY, False, True),
        (PublicKeyAlgorithmTag.EDDSA, True, False),
        (PublicKeyAlgorithmTag.ECDH, False, True),
    ],
)
def test_public_key_algorithm_capabilities(
    tag: PublicKeyAlgorithmTag, can_sign: bool, can_encrypt: bool
) -> None:
    assert tag.can_sign is can_sign
    assert tag.can_encrypt is can_encrypt
