"""
Public key import and export.
"""

from collections.abc import Iterable
from typing import TypeAlias

import pgpy
import structlog

from openpgp_mail.crypto.key_selector import KeySelector
from openpgp_mail.crypto.key_store import KeyStore
from openpgp_mail.crypto.keyring import KeyRingBundle, root_key
from openpgp_mail.exceptions import InvalidArgumentError

logger = structlog.get_logger(__name__)

ExportSource: TypeAlias = KeyRingBundle | Iterable[str | pgpy.PGPKey]


def _public_ring(key: pgpy.PGPKey) -> pgpy.PGPKey:
    ring = root_key(key)
    return ring if ring.is_public else ring.pubkey


class KeyExchangeService:
    """Moves public key-rings in and out of the key store."""

    def __init__(self, key_store: KeyStore, key_selector: KeySelector) -> None:
        """
        Args:
            key_store: Store whose public bundle is extended by imports.
            key_selector: Resolves identities on export.
        """
        self._key_store = key_store
        self._key_selector = key_selector

    def import_keys(self, data: bytes | str) -> int:
        """
        Merge an armored or binary key-ring bundle into the public bundle.

        Secret key-rings are imported as their public halves. An incoming
        ring replaces a stored ring with the same primary key id. Nothing is
        written when the input holds no rings.

        Returns:
            Number of rings imported.

        Raises:
            InvalidArgumentError: If ``data`` is missing.
            KeyRingError: If the data cannot be parsed or the bundle cannot be
                saved. The store keeps its previous bundle on failure.
        """
        if data is None:
            msg = "Key data is required"
            raise InvalidArgumentError(msg)

        incoming = KeyRingBundle.parse(data)
        if not incoming:
            logger.debug("No key-rings to import")
            return 0

        rings = [_public_ring(ring) for ring in incoming]
        merged = self._key_store.public_bundle.merged(rings)
        self._key_store.replace_public_bundle(merged)
        logger.info(
            "Imported key-rings",
            count=len(rings),
            key_ids=[ring.fingerprint.keyid for ring in rings],
        )
        return len(rings)

    def export_bundle(self, source: ExportSource) -> KeyRingBundle:
        """
        Assemble the public bundle to export.

        Identities resolve through the encryption key selector; keys export
        their whole public key-ring. Each ring appears once.

        Raises:
            InvalidArgumentError: If ``source`` is missing.
            CertificateNotFoundError: If an identity has no usable key.
        """
        if source is None:
            msg = "Keys to export are required"
            raise InvalidArgumentError(msg)
        if isinstance(source, KeyRingBundle):
            return KeyRingBundle(_public_ring(ring) for ring in source)
        if isinstance(source, (str, pgpy.PGPKey)):
            source = [source]

        rings: dict[str, pgpy.PGPKey] = {}
        for item in source:
            key = self._key_selector.select_encryption_key(item) if isinstance(item, str) else item
            if key is None:
                msg = "Keys to export must not be None"
                raise InvalidArgumentError(msg)
            ring = _public_ring(key)
            rings.setdefault(ring.fingerprint.keyid, ring)
        return KeyRingBundle(rings.values())

    def export_keys(self, source: ExportSource) -> bytes:
        """
        Export public key-rings as an ASCII-armored key block.

        Args:
            source: Identities, keys or a whole bundle.
        """
        bundle = self.export_bundle(source)
        logger.debug("Exporting key-rings", count=len(bundle))
        return bundle.armor()
