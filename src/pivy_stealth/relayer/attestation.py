"""
Attestation relayer: waits for a cross-chain bridge attestation.

A burn on the source chain is only redeemable on the destination chain once
the bridge's attestation service has signed the burn message. The service is
polled at a fixed interval:

    GET {base_url}/v1/messages/{source_domain}/{tx_hash}
    -> {"messages": [{"message": "0x...", "attestation": "0x..." | "PENDING"}]}

A 404 means the service has not seen the burn yet and counts as pending.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from pivy_stealth.core.models import Attestation
from pivy_stealth.exceptions import AttestationTimeout

logger = logging.getLogger("pivy_stealth.relayer")

SANDBOX_ATTESTATION_URL = "https://iris-api-sandbox.circle.com"
DEFAULT_MAX_ATTEMPTS = 12
DEFAULT_INTERVAL = 15.0
PENDING = "PENDING"


class AttestationClient:
    """
    Polls the attestation service until a message is signed.

    Usage:
        client = AttestationClient()
        att = client.wait_for(source_domain=5, tx_hash="5Kx...")
        redeem(att.message, att.attestation)
    """

    def __init__(
        self,
        base_url: str = SANDBOX_ATTESTATION_URL,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval: float = DEFAULT_INTERVAL,
        timeout: float = 15.0,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.base_url = base_url.rstrip("/")
        self.max_attempts = max_attempts
        self.interval = interval
        self._client = client or httpx.Client(timeout=timeout)
        self._sleep = sleep

    def fetch(self, source_domain: int, tx_hash: str) -> Attestation | None:
        """
        Single poll. Returns the attestation, or None while it is pending.

        Transport errors and non-200 responses are treated as pending.
        """
        url = f"{self.base_url}/v1/messages/{source_domain}/{tx_hash}"
        try:
            resp = self._client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"Attestation request failed: {e}")
            return None

        if resp.status_code != 200:
            logger.debug(f"Attestation service returned HTTP {resp.status_code}")
            return None

        try:
            body = resp.json()
        except ValueError:
            logger.warning("Attestation service returned a non-JSON body")
            return None

        if not isinstance(body, dict):
            logger.warning("Attestation service returned an unexpected body")
            return None

        messages: list[dict[str, Any]] = body.get("messages") or []
        if not messages:
            return None

        first = messages[0]
        attestation = first.get("attestation")
        if not attestation or attestation == PENDING:
            return None

        extra = {k: v for k, v in first.items() if k not in ("message", "attestation")}
        return Attestation(message=first.get("message", ""), attestation=attestation, extra=extra)

    def wait_for(self, source_domain: int, tx_hash: str) -> Attestation:
        """
        Poll until the attestation is ready.

        Raises:
            AttestationTimeout: if it is still pending after max_attempts polls.
        """
        for attempt in range(1, self.max_attempts + 1):
            logger.info(
                f"Polling attestation for {tx_hash[:16]}... "
                f"(attempt {attempt}/{self.max_attempts})"
            )
            result = self.fetch(source_domain, tx_hash)
            if result is not None:
                logger.info(f"Attestation ready for {tx_hash[:16]}...")
                return result
            if attempt < self.max_attempts:
                self._sleep(self.interval)

        raise AttestationTimeout(tx_hash, self.max_attempts)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> AttestationClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
