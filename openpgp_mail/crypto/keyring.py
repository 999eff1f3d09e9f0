"""
Key-ring bundles.

A key-ring is a primary pgpy key together with its subkeys and user ids. A
bundle is an ordered, immutable sequence of key-rings; mutations produce a
new bundle.
"""

from collections.abc import Iterable, Iterator
from email.utils import parseaddr
from typing import Self

import pgpy
import structlog
from pgpy.errors import PGPError

from openpgp_mail.crypto.armor import PUBLIC_KEY_BLOCK, armor, unarmor
from openpgp_mail.exceptions import KeyRingError, UnexpectedPacketError

logger = structlog.get_logger(__name__)


def iter_keys(rings: Iterable[pgpy.PGPKey]) -> Iterator[pgpy.PGPKey]:
    """Yield every key of every ring in order: primary first, then its subkeys."""
    for ring in rings:
        yield ring
        yield from ring.subkeys.values()


def identity_address(identity: str) -> str:
    """Address part of an identity such as ``"Alice <alice@example.com>"``."""
    _, address = parseaddr(identity)
    return (address or identity).strip()


def ring_matches(ring: pgpy.PGPKey, identity: str) -> bool:
    """Case-insensitive partial match of the identity against the ring's user ids."""
    needle = identity_address(identity).lower()
    if not needle:
        return False
    for uid in ring.userids:
        if uid.email and uid.email.lower() == needle:
            return True
        if uid.userid and needle in uid.userid.lower():
            return True
    return False


def root_key(key: pgpy.PGPKey) -> pgpy.PGPKey:
    return key.parent if key.parent is not None else key


class KeyRingBundle:
    """Ordered collection of key-rings."""

    __slots__ = ("_rings",)

    def __init__(self, rings: Iterable[pgpy.PGPKey] = ()) -> None:
        self._rings = tuple(rings)
        for ring in self._rings:
            if not ring.is_primary:
                msg = "Key-ring bundles hold primary keys only"
                raise ValueError(msg)

    @classmethod
    def parse(cls, data: bytes | bytearray | str) -> Self:
        """
        Parse an armored or binary bundle.

        Empty input and an armor block without rings are an empty bundle.

        Raises:
            KeyRingError: If the data is not a key-ring bundle.
        """
        if not data or not data.strip():
            return cls()

        try:
            body = unarmor(data)
        except (PGPError, UnexpectedPacketError) as e:
            msg = f"Failed to parse key-ring bundle: {e}"
            raise KeyRingError(msg) from e
        if not body:
            return cls()

        try:
            key, others = pgpy.PGPKey.from_blob(data)
        except Exception as e:
            msg = f"Failed to parse key-ring bundle: {e}"
            raise KeyRingError(msg) from e

        if key.fingerprint is None:
            return cls()
        rings = [key]
        rings.extend(
            other for other in others.values() if other.is_primary and other is not key
        )
        return cls(rings)

    def __len__(self) -> int:
        return len(self._rings)

    def __iter__(self) -> Iterator[pgpy.PGPKey]:
        return iter(self._rings)

    def __bool__(self) -> bool:
        return bool(self._rings)

    def __repr__(self) -> str:
        return f"KeyRingBundle(<{len(self._rings)} rings>)"

    @property
    def rings(self) -> tuple[pgpy.PGPKey, ...]:
        return self._rings

    def merged(self, rings: Iterable[pgpy.PGPKey]) -> Self:
        """
        New bundle with ``rings`` merged in.

        A ring whose primary key id is already present replaces the existing
        ring at its position; other rings are appended in order.
        """
        merged = list(self._rings)
        positions = {ring.fingerprint.keyid: index for index, ring in enumerate(merged)}
        for ring in rings:
            key_id = ring.fingerprint.keyid
            if key_id in positions:
                merged[positions[key_id]] = ring
                logger.debug("Replaced key-ring", key_id=key_id)
            else:
                positions[key_id] = len(merged)
                merged.append(ring)
        return type(self)(merged)

    def keys(self) -> Iterator[pgpy.PGPKey]:
        return iter_keys(self._rings)

    def get_key_rings(self, identity: str) -> list[pgpy.PGPKey]:
        """Rings whose user ids match ``identity``, in bundle order."""
        return [ring for ring in self._rings if ring_matches(ring, identity)]

    def get_key(self, key_id: str) -> pgpy.PGPKey | None:
        """Primary key or subkey with the exact key id, first match wins."""
        key_id = key_id.upper()
        return next((key for key in self.keys() if key.fingerprint.keyid == key_id), None)

    def encode(self) -> bytes:
        """Binary encoding of every ring, in order."""
        return b"".join(bytes(ring) for ring in self._rings)

    def armor(self) -> bytes:
        return armor(self.encode(), PUBLIC_KEY_BLOCK)
