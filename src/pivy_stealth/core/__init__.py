"""
pivy_stealth.core — Keys, payment workflows and the ledger boundary.
"""

from pivy_stealth.core.keys import Keypair, MetaKeys
from pivy_stealth.core.ledger import Ledger, RpcLedger
from pivy_stealth.core.models import (
    Attestation,
    MetaAddress,
    PaymentAnnouncement,
    ReceivedPayment,
    StealthPayment,
)
from pivy_stealth.core.payment import StealthPayer, StealthReceiver

__all__ = [
    "Keypair",
    "MetaKeys",
    "Ledger",
    "RpcLedger",
    "Attestation",
    "MetaAddress",
    "PaymentAnnouncement",
    "ReceivedPayment",
    "StealthPayment",
    "StealthPayer",
    "StealthReceiver",
]
