"""
pivy-stealth: stealth-address payments over Ed25519.

Usage:
    from pivy_stealth import MetaKeys, StealthPayer, StealthReceiver
    from pivy_stealth.crypto import derive_stealth_public_key, StealthSigner
"""

from pivy_stealth.core.keys import Keypair, MetaKeys
from pivy_stealth.core.models import MetaAddress, PaymentAnnouncement, StealthPayment
from pivy_stealth.core.payment import StealthPayer, StealthReceiver
from pivy_stealth.crypto.signer import StealthSigner

__version__ = "0.1.0"
__all__ = [
    "Keypair",
    "MetaKeys",
    "MetaAddress",
    "PaymentAnnouncement",
    "StealthPayment",
    "StealthPayer",
    "StealthReceiver",
    "StealthSigner",
]
