"""
pivy_stealth.relayer — Clients for services outside the ledger.
"""

from pivy_stealth.relayer.attestation import AttestationClient

__all__ = ["AttestationClient"]
