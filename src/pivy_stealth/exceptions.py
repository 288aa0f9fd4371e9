"""pivy-stealth exceptions.

Every failure in the stealth engine is local and synchronous: operations are
pure functions over fixed-size byte strings, so there is never partial state to
roll back and nothing is retried internally.
"""

from __future__ import annotations


class StealthError(Exception):
    """Base exception for all pivy-stealth errors."""

    pass


class InvalidKeyMaterial(StealthError, ValueError):
    """Raised for a malformed scalar or point.

    Wrong length, undecodable hex/base58, a point that is not on the curve, or
    a key that collapses to the identity. Supplying the same input again cannot
    succeed; the caller must fix it.
    """

    pass


class MemoIntegrityError(StealthError):
    """Raised when a memo does not decrypt to a consistent ephemeral keypair.

    The recomputed ephemeral public key is the only integrity check on the
    memo, so this signals a wrong recipient view key, corrupted transport, or a
    memo that belongs to another payment.
    """

    pass


class KeyMismatchError(StealthError):
    """Raised when the point-addition and scalar derivation paths disagree.

    Fatal: a spend must never proceed with a key whose public half has not been
    independently reproduced, or the funds become unspendable.

    Attributes:
        expected: Stealth public key from the point-addition path.
        derived: Stealth public key from the scalar path.
    """

    def __init__(self, message: str, expected: bytes, derived: bytes) -> None:
        super().__init__(message)
        self.message = message
        self.expected = expected
        self.derived = derived

    def __repr__(self) -> str:
        return (
            f"KeyMismatchError(message={self.message!r}, "
            f"expected={self.expected.hex()!r}, derived={self.derived.hex()!r})"
        )


class LedgerError(StealthError):
    """Raised when the ledger RPC endpoint returns an error.

    Attributes:
        message: Human-readable error message.
        code: JSON-RPC error code, if the endpoint supplied one.
    """

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        if self.code is not None:
            return f"[{self.code}] {self.message}"
        return self.message


class AttestationTimeout(StealthError):
    """Raised when a bridge attestation is still pending after every attempt."""

    def __init__(self, tx_hash: str, attempts: int) -> None:
        super().__init__(
            f"Attestation for {tx_hash} not ready after {attempts} attempts"
        )
        self.tx_hash = tx_hash
        self.attempts = attempts
