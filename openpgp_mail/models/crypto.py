"""
Algorithm enumerations and their OpenPGP wire identifiers.
"""

from enum import IntEnum, StrEnum


class DigestAlgorithm(StrEnum):
    """Digest algorithms as named by callers (micalg style)."""

    MD5 = "md5"
    SHA1 = "sha1"
    RIPEMD160 = "ripemd160"
    DOUBLE_SHA = "doublesha"
    MD2 = "md2"
    TIGER192 = "tiger192"
    HAVAL_5_160 = "haval-5-160"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SHA224 = "sha224"
    MD4 = "md4"


class HashAlgorithmTag(IntEnum):
    """OpenPGP hash algorithm identifiers."""

    MD5 = 1
    SHA1 = 2
    RIPEMD160 = 3
    DOUBLE_SHA = 4
    MD2 = 5
    TIGER192 = 6
    HAVAL_5PASS_160 = 7
    SHA256 = 8
    SHA384 = 9
    SHA512 = 10
    SHA224 = 11


class PublicKeyAlgorithm(StrEnum):
    """Public key algorithms as reported in signature results."""

    RSA_GENERAL = "rsa"
    RSA_ENCRYPT = "rsa-encrypt"
    RSA_SIGN = "rsa-sign"
    ELGAMAL_ENCRYPT = "elgamal-encrypt"
    DSA = "dsa"
    ELLIPTIC_CURVE = "ec"
    ELLIPTIC_CURVE_DSA = "ecdsa"
    ELGAMAL_GENERAL = "elgamal"
    DIFFIE_HELLMAN = "dh"
    EDWARDS_CURVE_DSA = "eddsa"


class PublicKeyAlgorithmTag(IntEnum):
    """OpenPGP public key algorithm identifiers."""

    RSA_ENCRYPT_OR_SIGN = 1
    RSA_ENCRYPT_ONLY = 2
    RSA_SIGN_ONLY = 3
    ELGAMAL_ENCRYPT_ONLY = 16
    DSA = 17
    ECDH = 18
    ECDSA = 19
    ELGAMAL_ENCRYPT_OR_SIGN = 20
    DIFFIE_HELLMAN = 21
    EDDSA = 22
    X25519 = 25
    ED25519 = 27

    @property
    def can_sign(self) -> bool:
        match self:
            case (
                self.RSA_ENCRYPT_OR_SIGN
                | self.RSA_SIGN_ONLY
                | self.DSA
                | self.ECDSA
                | self.ELGAMAL_ENCRYPT_OR_SIGN
                | self.EDDSA
                | self.ED25519
            ):
                return True
            case _:
                return False

    @property
    def can_encrypt(self) -> bool:
        match self:
            case (
                self.RSA_ENCRYPT_OR_SIGN
                | self.RSA_ENCRYPT_ONLY
                | self.ELGAMAL_ENCRYPT_ONLY
                | self.ECDH
                | self.ELGAMAL_ENCRYPT_OR_SIGN
                | self.DIFFIE_HELLMAN
                | self.X25519
            ):
                return True
            case _:
                return False


class KeyUsage(StrEnum):
    """Role a key is selected for."""

    ENCRYPT = "encrypt"
    SIGN = "sign"
