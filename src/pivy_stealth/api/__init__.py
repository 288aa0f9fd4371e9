"""
API module for pivy-stealth.

Provides FastAPI routes and models exposing the payer and receiver flows as a REST API.
"""

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

__all__ = [
    "AttestationResponse",
    "PayRequest",
    "PayResponse",
    "ReceiveRequest",
    "ReceiveResponse",
    "ScanRequest",
    "ScanResponse",
    "SignRequest",
    "SignResponse",
    "SubmitRequest",
    "SubmitResponse",
]
