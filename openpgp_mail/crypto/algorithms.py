"""
Translation between caller-facing algorithm names and OpenPGP wire identifiers.
"""

from cryptography.hazmat.primitives import hashes
from pgpy.constants import HashAlgorithm

from openpgp_mail.exceptions import UnsupportedAlgorithmError
from openpgp_mail.models.crypto import (
    DigestAlgorithm,
    HashAlgorithmTag,
    PublicKeyAlgorithm,
    PublicKeyAlgorithmTag,
)

_DIGEST_TO_TAG: dict[DigestAlgorithm, HashAlgorithmTag] = {
    DigestAlgorithm.MD5: HashAlgorithmTag.MD5,
    DigestAlgorithm.SHA1: HashAlgorithmTag.SHA1,
    DigestAlgorithm.RIPEMD160: HashAlgorithmTag.RIPEMD160,
    DigestAlgorithm.DOUBLE_SHA: HashAlgorithmTag.DOUBLE_SHA,
    DigestAlgorithm.MD2: HashAlgorithmTag.MD2,
    DigestAlgorithm.TIGER192: HashAlgorithmTag.TIGER192,
    DigestAlgorithm.HAVAL_5_160: HashAlgorithmTag.HAVAL_5PASS_160,
    DigestAlgorithm.SHA256: HashAlgorithmTag.SHA256,
    DigestAlgorithm.SHA384: HashAlgorithmTag.SHA384,
    DigestAlgorithm.SHA512: HashAlgorithmTag.SHA512,
    DigestAlgorithm.SHA224: HashAlgorithmTag.SHA224,
}
_TAG_TO_DIGEST = {tag: digest for digest, tag in _DIGEST_TO_TAG.items()}

_TAG_TO_PUBLIC_KEY: dict[PublicKeyAlgorithmTag, PublicKeyAlgorithm] = {
    PublicKeyAlgorithmTag.RSA_ENCRYPT_OR_SIGN: PublicKeyAlgorithm.RSA_GENERAL,
    PublicKeyAlgorithmTag.RSA_ENCRYPT_ONLY: PublicKeyAlgorithm.RSA_ENCRYPT,
    PublicKeyAlgorithmTag.RSA_SIGN_ONLY: PublicKeyAlgorithm.RSA_SIGN,
    PublicKeyAlgorithmTag.ELGAMAL_ENCRYPT_ONLY: PublicKeyAlgorithm.ELGAMAL_ENCRYPT,
    PublicKeyAlgorithmTag.DSA: PublicKeyAlgorithm.DSA,
    PublicKeyAlgorithmTag.ECDH: PublicKeyAlgorithm.ELLIPTIC_CURVE,
    PublicKeyAlgorithmTag.ECDSA: PublicKeyAlgorithm.ELLIPTIC_CURVE_DSA,
    PublicKeyAlgorithmTag.ELGAMAL_ENCRYPT_OR_SIGN: PublicKeyAlgorithm.ELGAMAL_GENERAL,
    PublicKeyAlgorithmTag.DIFFIE_HELLMAN: PublicKeyAlgorithm.DIFFIE_HELLMAN,
    PublicKeyAlgorithmTag.EDDSA: PublicKeyAlgorithm.EDWARDS_CURVE_DSA,
    PublicKeyAlgorithmTag.X25519: PublicKeyAlgorithm.ELLIPTIC_CURVE,
    PublicKeyAlgorithmTag.ED25519: PublicKeyAlgorithm.EDWARDS_CURVE_DSA,
}
_PUBLIC_KEY_TO_TAG: dict[PublicKeyAlgorithm, PublicKeyAlgorithmTag] = {}
for _tag, _algorithm in _TAG_TO_PUBLIC_KEY.items():
    _PUBLIC_KEY_TO_TAG.setdefault(_algorithm, _tag)


def get_hash_algorithm(digest: DigestAlgorithm) -> HashAlgorithmTag:
    """
    Map a digest algorithm to its OpenPGP hash identifier.

    Raises:
        UnsupportedAlgorithmError: If the digest has no OpenPGP identifier.
    """
    try:
        return _DIGEST_TO_TAG[DigestAlgorithm(digest)]
    except (KeyError, ValueError) as e:
        msg = "Digest algorithm has no OpenPGP identifier"
        raise UnsupportedAlgorithmError(msg, algorithm=str(digest)) from e


def get_digest_algorithm(tag: int) -> DigestAlgorithm:
    """
    Map an OpenPGP hash identifier to a digest algorithm.

    Raises:
        UnsupportedAlgorithmError: If the identifier is unknown.
    """
    try:
        return _TAG_TO_DIGEST[HashAlgorithmTag(int(tag))]
    except ValueError as e:
        msg = "Unknown OpenPGP hash algorithm"
        raise UnsupportedAlgorithmError(msg, algorithm=str(int(tag))) from e


def get_public_key_algorithm(tag: int) -> PublicKeyAlgorithm:
    """
    Map an OpenPGP public key identifier to a public key algorithm.

    Raises:
        UnsupportedAlgorithmError: If the identifier is unknown.
    """
    try:
        return _TAG_TO_PUBLIC_KEY[PublicKeyAlgorithmTag(int(tag))]
    except ValueError as e:
        msg = "Unknown OpenPGP public key algorithm"
        raise UnsupportedAlgorithmError(msg, algorithm=str(int(tag))) from e


def get_public_key_algorithm_tag(algorithm: PublicKeyAlgorithm) -> PublicKeyAlgorithmTag:
    try:
        return _PUBLIC_KEY_TO_TAG[PublicKeyAlgorithm(algorithm)]
    except (KeyError, ValueError) as e:
        msg = "Public key algorithm has no OpenPGP identifier"
        raise UnsupportedAlgorithmError(msg, algorithm=str(algorithm)) from e


def is_computable(algorithm: HashAlgorithm) -> bool:
    """Whether the engine can hash with ``algorithm``; pgpy looks hashes up by name."""
    return algorithm.is_supported and hasattr(hashes, algorithm.name)


def to_pgpy_hash(digest: DigestAlgorithm) -> HashAlgorithm:
    """
    Resolve the engine hash used to sign with ``digest``.

    Raises:
        UnsupportedAlgorithmError: If there is no identifier or the engine
            cannot compute the hash.
    """
    tag = get_hash_algorithm(digest)
    try:
        algorithm = HashAlgorithm(int(tag))
    except ValueError as e:
        msg = "Digest algorithm is not available for signing"
        raise UnsupportedAlgorithmError(msg, algorithm=str(digest)) from e
    if not is_computable(algorithm):
        msg = "Digest algorithm is not available for signing"
        raise UnsupportedAlgorithmError(msg, algorithm=str(digest))
    return algorithm


def try_digest_algorithm(tag: int) -> DigestAlgorithm | None:
    try:
        return get_digest_algorithm(tag)
    except UnsupportedAlgorithmError:
        return None


def try_public_key_algorithm(tag: int) -> PublicKeyAlgorithm | None:
    try:
        return get_public_key_algorithm(tag)
    except UnsupportedAlgorithmError:
        return None
