"""
Data models for stealth payments.
All keys are carried as Base58 strings, the form they take on the ledger.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from pivy_stealth.encoding import decode_label, encode_label


def _normalize_label(value: Any) -> Any:
    """
    Accept a label as text or as the raw 32-byte ledger field.

    Raises ValueError if it does not fit the field.
    """
    if isinstance(value, (str, bytes, bytearray)):
        return decode_label(encode_label(value))
    return value


class MetaAddress(BaseModel):
    """A recipient's public identity: meta-spend and meta-view public keys."""
    meta_spend_pub: str
    meta_view_pub: str

    def to_string(self) -> str:
        """Compact single-string form: ``<spend>:<view>``."""
        return f"{self.meta_spend_pub}:{self.meta_view_pub}"

    @classmethod
    def from_string(cls, value: str) -> MetaAddress:
        spend, sep, view = value.partition(":")
        if not sep or not spend or not view:
            raise ValueError(f"Malformed meta address: {value!r}")
        return cls(meta_spend_pub=spend, meta_view_pub=view)


class StealthPayment(BaseModel):
    """What a payer produces for one payment, before it hits the ledger."""
    stealth_owner: str  # one-time destination public key
    eph_pubkey: str
    memo: str  # Base58 of nonce ‖ ciphertext
    label: str = ""
    amount: int = 0
    mint: str | None = None

    @field_validator("label", mode="before")
    @classmethod
    def _pack_label(cls, value: Any) -> Any:
        return _normalize_label(value)

    def to_announcement(
        self,
        payer: str | None = None,
        announce: bool = False,
    ) -> PaymentAnnouncement:
        """Shape the payment as the event the ledger program emits for it."""
        return PaymentAnnouncement(
            stealth_owner=self.stealth_owner,
            eph_pubkey=self.eph_pubkey,
            memo=self.memo,
            label=self.label,
            payer=payer,
            mint=self.mint,
            amount=self.amount,
            announce=announce,
        )


class PaymentAnnouncement(BaseModel):
    """
    A payment event as observed on the ledger.

    `announce` is False when funds moved with the payment and True for a
    log-only announcement of a payment made elsewhere.
    """
    stealth_owner: str
    eph_pubkey: str
    memo: str
    label: str = ""
    payer: str | None = None
    mint: str | None = None
    amount: int = 0
    announce: bool = False

    @field_validator("label", mode="before")
    @classmethod
    def _pack_label(cls, value: Any) -> Any:
        return _normalize_label(value)


class ReceivedPayment(BaseModel):
    """An announcement that scanning matched to the receiver's meta keys."""
    announcement: PaymentAnnouncement
    stealth_owner: str
    label: str = ""
    amount: int = 0
    mint: str | None = None


class Attestation(BaseModel):
    """A bridge message and its attestation, both hex-encoded."""
    message: str
    attestation: str
    extra: dict[str, Any] = Field(default_factory=dict)
