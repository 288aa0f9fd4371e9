"""
Ledger: the boundary between the stealth engine and the chain it pays on.

The engine only needs two things from a ledger: accept signed bytes and hand
back stored account data. RpcLedger speaks the Solana-style JSON-RPC dialect
over httpx.
"""

from __future__ import annotations

import base64
import itertools
import logging
from typing import Any, Protocol

import httpx

from pivy_stealth.exceptions import LedgerError

logger = logging.getLogger("pivy_stealth.ledger")

PUBLIC_DEVNET_URL = "https://api.devnet.solana.com"


class Ledger(Protocol):
    """Anything that can submit signed transactions and fetch stored data."""

    def submit(self, signed: bytes) -> str:
        """Submit a signed transaction, returning its identifier."""
        ...

    def fetch(self, identifier: str) -> bytes:
        """Return the raw data stored under an account identifier."""
        ...


class RpcLedger:
    """
    Synchronous JSON-RPC ledger client.

    Usage:
        with RpcLedger("http://localhost:8899") as ledger:
            tx_id = ledger.submit(signed_tx)
    """

    def __init__(
        self,
        rpc_url: str = PUBLIC_DEVNET_URL,
        timeout: float = 15.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.rpc_url = rpc_url.rstrip("/")
        self._client = client or httpx.Client(
            headers={"Content-Type": "application/json"}, timeout=timeout
        )
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def submit(self, signed: bytes) -> str:
        """
        Broadcast a signed transaction.

        Args:
            signed: serialized signed transaction bytes.

        Returns:
            str: the transaction signature reported by the node.
        """
        encoded = base64.b64encode(bytes(signed)).decode("ascii")
        result = self._rpc("sendTransaction", [encoded, {"encoding": "base64"}])
        if not isinstance(result, str):
            raise LedgerError(f"Unexpected sendTransaction result: {result!r}")
        logger.info(f"Submitted transaction {result[:16]}...")
        return result

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def fetch(self, identifier: str) -> bytes:
        """Fetch an account's data. Raises LedgerError if the account does not exist."""
        result = self._rpc("getAccountInfo", [identifier, {"encoding": "base64"}])
        value = (result or {}).get("value")
        if value is None:
            raise LedgerError(f"Account not found: {identifier}")
        data, _encoding = value["data"]
        return base64.b64decode(data)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _rpc(self, method: str, params: list[Any]) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        try:
            resp = self._client.post(self.rpc_url, json=payload)
        except httpx.HTTPError as e:
            raise LedgerError(f"{method} request failed: {e}") from e

        if resp.status_code != 200:
            raise LedgerError(f"{method} returned HTTP {resp.status_code}: {resp.text}")

        try:
            body = resp.json()
        except ValueError as e:
            raise LedgerError(f"{method} returned invalid JSON") from e
        if not isinstance(body, dict):
            raise LedgerError(f"{method} returned an unexpected body: {body!r}")

        if "error" in body:
            err = body["error"] or {}
            raise LedgerError(err.get("message", "unknown error"), code=err.get("code"))
        return body.get("result")

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RpcLedger:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
