"""
OpenPGP message processing for mail.

Signs, encrypts, decrypts and verifies message payloads with local key-rings,
and imports and exports public keys.

Example:
    ```python
    from openpgp_mail import (
        DigestAlgorithm,
        OpenPgpConfig,
        OpenPgpContext,
        StaticPassphraseProvider,
    )

    config = OpenPgpConfig.from_directory("/home/me/.gnupg")
    context = OpenPgpContext(config, StaticPassphraseProvider("secret"))

    signature = context.sign("me@example.com", DigestAlgorithm.SHA256, b"hello")
    encrypted = context.encrypt(["alice@example.com"], b"hello")
    result = context.decrypt(encrypted.content)
    ```
"""

from openpgp_mail.config import ExpiryPolicy, OpenPgpConfig
from openpgp_mail.context import OpenPgpContext
from openpgp_mail.crypto.keyring import KeyRingBundle
from openpgp_mail.crypto.passphrase import PassphraseProvider, StaticPassphraseProvider
from openpgp_mail.crypto.secure_bytes import SecureBytes
from openpgp_mail.exceptions import (
    CertificateNotFoundError,
    CryptoError,
    IntegrityError,
    InvalidArgumentError,
    KeyRingError,
    KeyUnlockError,
    NoEncryptedDataError,
    OpenPgpError,
    RecursiveCompressionError,
    SessionKeyError,
    UnexpectedPacketError,
    UnsupportedAlgorithmError,
)
from openpgp_mail.models import (
    DecryptionResult,
    DigestAlgorithm,
    DigitalSignature,
    MimeAttachment,
    PublicKeyAlgorithm,
    SignatureError,
    SignatureStatus,
)

__version__ = "0.1.0"

__all__ = [
    # Main context
    "OpenPgpContext",
    "OpenPgpConfig",
    "ExpiryPolicy",
    # Keys
    "KeyRingBundle",
    "PassphraseProvider",
    "StaticPassphraseProvider",
    "SecureBytes",
    # Models
    "DecryptionResult",
    "DigestAlgorithm",
    "DigitalSignature",
    "MimeAttachment",
    "PublicKeyAlgorithm",
    "SignatureError",
    "SignatureStatus",
    # Exceptions
    "OpenPgpError",
    "InvalidArgumentError",
    "CertificateNotFoundError",
    "KeyRingError",
    "CryptoError",
    "KeyUnlockError",
    "SessionKeyError",
    "IntegrityError",
    "UnexpectedPacketError",
    "NoEncryptedDataError",
    "RecursiveCompressionError",
    "UnsupportedAlgorithmError",
]
