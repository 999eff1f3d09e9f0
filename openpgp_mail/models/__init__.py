"""
Domain models for openpgp_mail.
"""

from openpgp_mail.models.crypto import (
    DigestAlgorithm,
    HashAlgorithmTag,
    KeyUsage,
    PublicKeyAlgorithm,
    PublicKeyAlgorithmTag,
)
from openpgp_mail.models.mime import (
    ENCRYPTION_PROTOCOL,
    KEY_EXCHANGE_PROTOCOL,
    OCTET_STREAM,
    SIGNATURE_PROTOCOL,
    MimeAttachment,
)
from openpgp_mail.models.signatures import (
    DecryptionResult,
    DigitalSignature,
    SignatureError,
    SignatureStatus,
)

__all__ = [
    "DecryptionResult",
    "DigestAlgorithm",
    "DigitalSignature",
    "ENCRYPTION_PROTOCOL",
    "HashAlgorithmTag",
    "KEY_EXCHANGE_PROTOCOL",
    "KeyUsage",
    "MimeAttachment",
    "OCTET_STREAM",
    "PublicKeyAlgorithm",
    "PublicKeyAlgorithmTag",
    "SIGNATURE_PROTOCOL",
    "SignatureError",
    "SignatureStatus",
]
