"""
Runtime configuration for the ledger and attestation clients.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from pivy_stealth.core.ledger import PUBLIC_DEVNET_URL, RpcLedger
from pivy_stealth.relayer.attestation import (
    DEFAULT_INTERVAL,
    DEFAULT_MAX_ATTEMPTS,
    SANDBOX_ATTESTATION_URL,
    AttestationClient,
)


@dataclass
class StealthConfig:
    """
    Endpoints and timing for the network collaborators.

    Args:
        rpc_url:                    Ledger JSON-RPC endpoint
        attestation_url:            Bridge attestation service base URL
        attestation_max_attempts:   Polls before giving up on an attestation
        attestation_interval:       Seconds between polls
        http_timeout:               Per-request timeout in seconds
    """
    rpc_url: str = PUBLIC_DEVNET_URL
    attestation_url: str = SANDBOX_ATTESTATION_URL
    attestation_max_attempts: int = DEFAULT_MAX_ATTEMPTS
    attestation_interval: float = DEFAULT_INTERVAL
    http_timeout: float = 15.0

    @classmethod
    def from_env(cls) -> StealthConfig:
        """Read PIVY_* environment variables, falling back to the defaults."""
        return cls(
            rpc_url=os.getenv("PIVY_RPC_URL", PUBLIC_DEVNET_URL),
            attestation_url=os.getenv("PIVY_ATTESTATION_URL", SANDBOX_ATTESTATION_URL),
            attestation_max_attempts=int(
                os.getenv("PIVY_ATTESTATION_MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS))
            ),
            attestation_interval=float(
                os.getenv("PIVY_ATTESTATION_INTERVAL", str(DEFAULT_INTERVAL))
            ),
            http_timeout=float(os.getenv("PIVY_HTTP_TIMEOUT", "15.0")),
        )

    def ledger(self) -> RpcLedger:
        return RpcLedger(self.rpc_url, timeout=self.http_timeout)

    def attestation_client(self) -> AttestationClient:
        return AttestationClient(
            self.attestation_url,
            max_attempts=self.attestation_max_attempts,
            interval=self.attestation_interval,
            timeout=self.http_timeout,
        )
