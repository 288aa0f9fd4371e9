import logging
import secrets
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pivy_stealth.api.routes import router
from pivy_stealth.config import StealthConfig
from pivy_stealth.core.payment import StealthPayer
from pivy_stealth.exceptions import (
    KeyMismatchError,
    LedgerError,
    MemoIntegrityError,
    StealthError,
)

logger = logging.getLogger("pivy_stealth.api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Load configuration
    config = StealthConfig.from_env()
    logger.info(f"Stealth API starting (rpc={config.rpc_url})")

    app.state.payer = StealthPayer(random_bytes=secrets.token_bytes)
    app.state.ledger = config.ledger()
    app.state.attestation = config.attestation_client()

    yield

    app.state.ledger.close()
    app.state.attestation.close()


app = FastAPI(
    title="PIVY Stealth API",
    description="REST API over the stealth-address payer and receiver flows",
    version="0.1.0",
    lifespan=lifespan,
)

# Allow CORS for easy frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.include_router(router)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )


@app.exception_handler(MemoIntegrityError)
async def memo_error_handler(request: Request, exc: MemoIntegrityError):
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc)},
    )


@app.exception_handler(KeyMismatchError)
async def key_mismatch_handler(request: Request, exc: KeyMismatchError):
    logger.error(f"Key mismatch on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=409,
        content={"detail": str(exc)},
    )


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    logger.error(f"Ledger error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": str(exc)},
    )


@app.exception_handler(StealthError)
async def stealth_error_handler(request: Request, exc: StealthError):
    return JSONResponse(
        status_code=400,
        content={"detail": str(exc)},
    )


@app.get("/health")
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok"}
