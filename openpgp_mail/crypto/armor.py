"""ASCII armor helpers on top of pgpy's armor codec."""

import re
from typing import Self

from pgpy.types import Armorable

from openpgp_mail.exceptions import UnexpectedPacketError

MESSAGE = "MESSAGE"
SIGNATURE = "SIGNATURE"
PUBLIC_KEY_BLOCK = "PUBLIC KEY BLOCK"

# pgpy's armor pattern requires at least one body line.
_EMPTY_BLOCK = re.compile(
    r"^-{5}BEGIN PGP (?P<magic>[A-Z0-9 ,]+)-{5}\r?\n"
    r"(?:.+: .+\r?\n)*"
    r"\s*(?:=[A-Za-z0-9+/]{4}\s*)?"
    r"^-{5}END PGP (?P=magic)-{5}",
    flags=re.MULTILINE,
)


class ArmoredBlock(Armorable):
    """Arbitrary packet bytes rendered as an armored block by ``str()``."""

    def __init__(self) -> None:
        super().__init__()
        self._magic = MESSAGE
        self._data = b""

    @classmethod
    def wrap(cls, data: bytes | bytearray, magic: str = MESSAGE) -> Self:
        block = cls()
        block._magic = magic
        block._data = bytes(data)
        return block

    @property
    def magic(self) -> str:
        return self._magic

    def parse(self, packet: bytes | bytearray | str) -> None:
        unarmored = self.ascii_unarmor(packet)
        if unarmored["magic"] is not None:
            self._magic = unarmored["magic"]
        self._data = bytes(unarmored["body"])

    def __bytes__(self) -> bytes:
        return self._data

    def encode(self) -> bytes:
        return str(self).encode("ascii")


def armor(data: bytes | bytearray, magic: str = MESSAGE) -> bytes:
    """Armor packet bytes with the given block type."""
    return ArmoredBlock.wrap(data, magic).encode()


def is_empty_block(data: bytes | bytearray | str) -> bool:
    """Whether ``data`` is an armor block with no body."""
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("latin-1")
    return _EMPTY_BLOCK.search(data) is not None


def unarmor(data: bytes | bytearray | str) -> bytearray:
    """
    Return the binary packet stream of armored or binary input.

    An armor block with no body yields no packets.

    Raises:
        UnexpectedPacketError: If the input is text without an armor block.
    """
    try:
        unarmored = Armorable.ascii_unarmor(data)
    except ValueError as e:
        if is_empty_block(data):
            return bytearray()
        msg = "Input is neither binary OpenPGP data nor ASCII armor"
        raise UnexpectedPacketError(msg) from e
    return bytearray(unarmored["body"])
