"""
Signature verification results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntFlag, StrEnum
from typing import Any

import pgpy

from openpgp_mail.models.crypto import DigestAlgorithm, PublicKeyAlgorithm


class SignatureStatus(StrEnum):
    GOOD = "good"
    BAD = "bad"
    ERROR = "error"


class SignatureError(IntFlag):
    NONE = 0
    NO_PUBLIC_KEY = 1
    UNSUPPORTED_ALGORITHM = 2


@dataclass(frozen=True, kw_only=True)
class DigitalSignature:
    """
    Outcome of verifying one signature packet.

    Attributes:
        key_id: Issuer key id (16 upper-case hex digits).
        public_key_algorithm: Signer's public key algorithm.
        digest_algorithm: Digest the signature was computed with.
        creation_date: Signature creation time (UTC).
        public_key: Resolved signer key, None when unknown.
        status: Verification verdict.
        errors: Reasons for an ERROR status.
    """

    key_id: str
    public_key_algorithm: PublicKeyAlgorithm | None
    digest_algorithm: DigestAlgorithm | None
    creation_date: datetime | None
    public_key: pgpy.PGPKey | None = field(default=None, compare=False, repr=False)
    status: SignatureStatus
    errors: SignatureError = SignatureError.NONE

    @property
    def verified(self) -> bool:
        return self.status is SignatureStatus.GOOD


@dataclass(frozen=True, kw_only=True)
class DecryptionResult:
    """
    Decrypted payload with its embedded signature verdicts.

    Attributes:
        entity: The plaintext re-parsed by the document parser.
        content: Raw plaintext bytes.
        signatures: One result per trailing signature, in stream order.
    """

    entity: Any = field(repr=False)
    content: bytes = field(repr=False)
    signatures: list[DigitalSignature] = field(default_factory=list)
