from pydantic import BaseModel, Field

from pivy_stealth.core.models import PaymentAnnouncement, ReceivedPayment


class PayRequest(BaseModel):
    """Request model for deriving a stealth payment to a meta address."""

    meta_spend_pub: str = Field(..., description="Recipient meta-spend public key (base58 or hex)")
    meta_view_pub: str = Field(..., description="Recipient meta-view public key (base58 or hex)")
    label: str = Field("", description="Optional payment label, at most 32 UTF-8 bytes")
    amount: int = Field(0, ge=0, description="Amount in the mint's base units")
    mint: str | None = Field(None, description="Token mint address, if not the native asset")


class PayResponse(BaseModel):
    """Response model for a derived stealth payment."""

    stealth_owner: str = Field(..., description="One-time destination public key (base58)")
    eph_pubkey: str = Field(..., description="Ephemeral public key to announce (base58)")
    memo: str = Field(..., description="Encrypted ephemeral key memo (base58)")
    label: str = ""
    amount: int = 0
    mint: str | None = None


class ReceiveRequest(BaseModel):
    """Request model for checking a single announcement against meta keys."""

    meta_view_priv: str = Field(..., description="Recipient meta-view private seed")
    meta_spend_pub: str = Field(..., description="Recipient meta-spend public key")
    meta_spend_priv: str | None = Field(
        None,
        description="Recipient meta-spend private seed. Omit for a view-only check.",
    )
    announcement: PaymentAnnouncement


class ReceiveResponse(BaseModel):
    """Response model for a matched announcement."""

    stealth_owner: str
    label: str = ""
    spendable: bool = Field(
        ..., description="True if the spend key was supplied and reproduces stealth_owner"
    )


class SignRequest(BaseModel):
    """Request model for signing with the key of a received stealth payment."""

    meta_view_priv: str
    meta_spend_priv: str
    meta_spend_pub: str
    announcement: PaymentAnnouncement
    message_hex: str = Field(..., description="Message bytes to sign, hex-encoded")


class SignResponse(BaseModel):
    """Response model for a stealth signature."""

    public_key: str = Field(..., description="Stealth public key (base58)")
    signature: str = Field(..., description="64-byte Ed25519 signature, hex-encoded")


class ScanRequest(BaseModel):
    """Request model for scanning a batch of announcements."""

    meta_view_priv: str
    meta_spend_pub: str
    announcements: list[PaymentAnnouncement]


class ScanResponse(BaseModel):
    """Response model for a scan."""

    scanned: int
    payments: list[ReceivedPayment]


class SubmitRequest(BaseModel):
    """Request model for broadcasting a signed transaction."""

    transaction: str = Field(..., description="Serialized signed transaction, base64-encoded")


class SubmitResponse(BaseModel):
    """Response model for a broadcast transaction."""

    tx_id: str = Field(..., description="Transaction signature reported by the ledger")


class AttestationResponse(BaseModel):
    """Response model for a bridge attestation lookup."""

    status: str = Field(..., description="'ready' once signed, otherwise 'pending'")
    message: str | None = None
    attestation: str | None = None
