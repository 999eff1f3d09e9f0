"""
Message processing services for openpgp_mail.
"""

from openpgp_mail.services.decryption_service import DecryptionService
from openpgp_mail.services.encryption_service import EncryptionService
from openpgp_mail.services.key_exchange_service import KeyExchangeService
from openpgp_mail.services.signing_service import SigningService
from openpgp_mail.services.verification_service import VerificationService

__all__ = [
    "DecryptionService",
    "EncryptionService",
    "KeyExchangeService",
    "SigningService",
    "VerificationService",
]
