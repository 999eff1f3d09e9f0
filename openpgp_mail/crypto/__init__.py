"""
Key handling and packet plumbing for OpenPGP messages.

This module provides:
- Key-ring bundles and the key store
- Key selection under the usability policy
- Passphrase handling and secret key unlocking
- Packet object reading and outbound layer building
"""

from openpgp_mail.crypto.key_selector import (
    KeyCapabilities,
    KeySelector,
    find_usable_key,
    is_key_usable,
)
from openpgp_mail.crypto.key_store import KeyStore
from openpgp_mail.crypto.keyring import KeyRingBundle, iter_keys
from openpgp_mail.crypto.packets import PacketReader, PacketTag
from openpgp_mail.crypto.passphrase import (
    PassphraseProvider,
    StaticPassphraseProvider,
    unlock_secret_key,
)
from openpgp_mail.crypto.secure_bytes import SecureBytes

__all__ = [
    "KeyCapabilities",
    "KeyRingBundle",
    "KeySelector",
    "KeyStore",
    "PacketReader",
    "PacketTag",
    "PassphraseProvider",
    "SecureBytes",
    "StaticPassphraseProvider",
    "find_usable_key",
    "is_key_usable",
    "iter_keys",
    "unlock_secret_key",
]
