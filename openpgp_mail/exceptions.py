"""
OpenPGP mail exception hierarchy.

All exceptions inherit from OpenPgpError for easy catching.
"""

from typing import Any


class OpenPgpError(Exception):
    """Base exception for all openpgp_mail errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class InvalidArgumentError(OpenPgpError):
    """A required input is missing or a key cannot play the requested role."""


class CertificateNotFoundError(OpenPgpError):
    """No usable key matches the requested identity or key id."""

    def __init__(
        self, message: str, *, identity: str | None = None, key_id: str | None = None
    ) -> None:
        super().__init__(message, identity=identity, key_id=key_id)
        self.identity = identity
        self.key_id = key_id


class KeyRingError(OpenPgpError):
    """A key-ring file could not be read, parsed or saved."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message, path=path)
        self.path = path


class CryptoError(OpenPgpError):
    """Cryptographic operation failed."""


class KeyUnlockError(CryptoError):
    """Failed to unlock a secret key with the provided passphrase."""

    def __init__(self, message: str, *, key_id: str | None = None) -> None:
        super().__init__(message, key_id=key_id)
        self.key_id = key_id


class SessionKeyError(CryptoError):
    """Failed to recover the session key of an encrypted message."""


class IntegrityError(CryptoError):
    """Encrypted data failed its modification detection check."""


class UnexpectedPacketError(CryptoError):
    """The packet stream does not have the expected structure."""

    def __init__(self, message: str, *, packet: str | None = None) -> None:
        super().__init__(message, packet=packet)
        self.packet = packet


class NoEncryptedDataError(CryptoError):
    """The encrypted data list has no public-key encrypted session key."""


class RecursiveCompressionError(CryptoError):
    """A compressed layer was found inside another compressed layer."""


class UnsupportedAlgorithmError(CryptoError):
    """A digest or public-key algorithm has no mapping."""

    def __init__(self, message: str, *, algorithm: str | None = None) -> None:
        super().__init__(message, algorithm=algorithm)
        self.algorithm = algorithm
