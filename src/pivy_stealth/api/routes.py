
import base64

from fastapi import APIRouter, HTTPException, Request, Response

from pivy_stealth.api.models import (
    AttestationResponse,
    PayRequest,
    PayResponse,
    ReceiveRequest,
    ReceiveResponse,
    ScanRequest,
    ScanResponse,
    SignRequest,
    SignResponse,
    SubmitRequest,
    SubmitResponse,
)
from pivy_stealth.core.ledger import Ledger
from pivy_stealth.core.models import MetaAddress
from pivy_stealth.core.payment import StealthPayer, StealthReceiver
from pivy_stealth.encoding import b58encode
from pivy_stealth.exceptions import MemoIntegrityError
from pivy_stealth.relayer.attestation import AttestationClient

router = APIRouter(prefix="/stealth", tags=["Stealth Payments"])


def get_payer(request: Request) -> StealthPayer:
    """Dependency to retrieve the initialized StealthPayer from app state."""
    payer = getattr(request.app.state, "payer", None)
    if not payer:
        raise HTTPException(status_code=500, detail="stealth payer not initialized")
    return payer


def get_ledger(request: Request) -> Ledger:
    """Dependency to retrieve the ledger client from app state."""
    ledger = getattr(request.app.state, "ledger", None)
    if not ledger:
        raise HTTPException(status_code=500, detail="ledger client not initialized")
    return ledger


def get_attestation_client(request: Request) -> AttestationClient:
    """Dependency to retrieve the attestation client from app state."""
    client = getattr(request.app.state, "attestation", None)
    if not client:
        raise HTTPException(status_code=500, detail="attestation client not initialized")
    return client


@router.post("/pay", response_model=PayResponse)
async def pay(request: Request, req: PayRequest):
    """
    Derive a fresh stealth destination for a meta address.

    The caller sends funds to `stealth_owner` and publishes `eph_pubkey` and
    `memo` alongside the transfer.
    """
    payer = get_payer(request)
    payment = payer.create_payment(
        MetaAddress(meta_spend_pub=req.meta_spend_pub, meta_view_pub=req.meta_view_pub),
        label=req.label,
        amount=req.amount,
        mint=req.mint,
    )
    return PayResponse(**payment.model_dump())


@router.post("/receive", response_model=ReceiveResponse)
async def receive(req: ReceiveRequest):
    """
    Check whether an announcement is addressed to the given meta keys.

    With the spend key supplied, the stealth key is fully re-derived and
    cross-checked; without it, only the view-key match is confirmed.
    """
    receiver = StealthReceiver(req.meta_view_priv, req.meta_spend_pub, req.meta_spend_priv)
    try:
        mine = receiver.is_mine(req.announcement)
    except MemoIntegrityError:
        mine = False
    if not mine:
        raise HTTPException(status_code=404, detail="Announcement is not addressed to these keys")

    spendable = False
    if receiver.can_spend:
        receiver.open(req.announcement)
        spendable = True

    return ReceiveResponse(
        stealth_owner=req.announcement.stealth_owner,
        label=req.announcement.label,
        spendable=spendable,
    )


@router.post("/sign", response_model=SignResponse)
async def sign(req: SignRequest):
    """Sign a message with the stealth key of a received payment."""
    message = bytes.fromhex(req.message_hex)
    receiver = StealthReceiver(req.meta_view_priv, req.meta_spend_pub, req.meta_spend_priv)
    signer = receiver.open(req.announcement)
    return SignResponse(
        public_key=b58encode(signer.public_key),
        signature=signer.sign(message).hex(),
    )


@router.post("/scan", response_model=ScanResponse)
async def scan(req: ScanRequest):
    """Return the announcements in a batch that belong to the given view key."""
    receiver = StealthReceiver(req.meta_view_priv, req.meta_spend_pub)
    payments = receiver.scan(req.announcements)
    return ScanResponse(scanned=len(req.announcements), payments=payments)


@router.post("/submit", response_model=SubmitResponse)
async def submit(request: Request, req: SubmitRequest):
    """Broadcast a signed transaction, e.g. a transfer to a stealth owner."""
    ledger = get_ledger(request)
    signed = base64.b64decode(req.transaction, validate=True)
    return SubmitResponse(tx_id=ledger.submit(signed))


@router.get("/attestation/{source_domain}/{tx_hash}", response_model=AttestationResponse)
async def attestation(request: Request, response: Response, source_domain: int, tx_hash: str):
    """
    Look up the bridge attestation for a burn.

    Polls once; answers 202 while the attestation service is still signing.
    """
    client = get_attestation_client(request)
    result = client.fetch(source_domain, tx_hash)
    if result is None:
        response.status_code = 202
        return AttestationResponse(status="pending")
    return AttestationResponse(
        status="ready", message=result.message, attestation=result.attestation
    )
