"""
OpenPGP context configuration.
"""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Any, Self

from pgpy.constants import CompressionAlgorithm

PUBLIC_KEYRING_NAME = "pubring.gpg"
SECRET_KEYRING_NAME = "secring.gpg"

_SUPPORTED_COMPRESSION = frozenset(
    {
        CompressionAlgorithm.Uncompressed,
        CompressionAlgorithm.ZIP,
        CompressionAlgorithm.ZLIB,
        CompressionAlgorithm.BZ2,
    }
)


class ExpiryPolicy(StrEnum):
    """How key expiry is applied during key selection."""

    REJECT_EXPIRED = "reject-expired"
    LEGACY_INVERTED = "legacy-inverted"


@dataclass(frozen=True, kw_only=True)
class OpenPgpConfig:
    """
    Attributes:
        public_keyring_path: File holding the public key-ring bundle.
        secret_keyring_path: File holding the secret key-ring bundle.
        compression: Compression layer used for signed and encrypted output.
        literal_filename: File name stored in literal data packets.
        expiry_policy: Expiry rule applied when selecting keys.
    """

    public_keyring_path: Path
    secret_keyring_path: Path
    compression: CompressionAlgorithm = CompressionAlgorithm.ZLIB
    literal_filename: str = "mime.txt"
    expiry_policy: ExpiryPolicy = ExpiryPolicy.REJECT_EXPIRED

    def __post_init__(self) -> None:
        if Path(self.public_keyring_path) == Path(self.secret_keyring_path):
            msg = "public and secret key-rings must use different files"
            raise ValueError(msg)
        if self.compression not in _SUPPORTED_COMPRESSION:
            msg = f"unsupported compression algorithm: {self.compression!r}"
            raise ValueError(msg)
        if not self.literal_filename:
            msg = "literal_filename must not be empty"
            raise ValueError(msg)
        try:
            encoded = self.literal_filename.encode("latin-1")
        except UnicodeEncodeError as e:
            msg = "literal_filename must be latin-1 encodable"
            raise ValueError(msg) from e
        if len(encoded) > 255:
            msg = "literal_filename must fit in 255 bytes"
            raise ValueError(msg)
        if not isinstance(self.expiry_policy, ExpiryPolicy):
            msg = f"unknown expiry policy: {self.expiry_policy!r}"
            raise ValueError(msg)

    @classmethod
    def from_directory(cls, directory: str | Path, **options: Any) -> Self:
        """Use the conventional key-ring file names inside a directory."""
        directory = Path(directory)
        return cls(
            public_keyring_path=directory / PUBLIC_KEYRING_NAME,
            secret_keyring_path=directory / SECRET_KEYRING_NAME,
            **options,
        )
