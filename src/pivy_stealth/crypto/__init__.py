"""
pivy_stealth.crypto — Cryptographic core of the stealth-address protocol.

Provides:
- Ed25519 scalar/point arithmetic (mod-L reduction, clamping, seed scalars)
- X25519-compatible shared secrets between Ed25519 keys
- Ephemeral-key memo cipher (payer → recipient)
- Stealth key derivation over two cross-checked paths
- Deterministic EdDSA signer working from a raw stealth scalar
"""

from pivy_stealth.crypto.ecdh import ecdh, shared_secret_from_scalar
from pivy_stealth.crypto.ed25519 import (
    BASE_POINT,
    ED25519_L,
    clamp_scalar,
    decode_point,
    encode_point,
    is_valid_point,
    point_add,
    point_multiply,
    public_key_from_seed,
    reduce_mod,
    scalar_from_seed,
)
from pivy_stealth.crypto.memo import (
    MEMO_LENGTH,
    RandomSource,
    decrypt_ephemeral_key,
    encrypt_ephemeral_key,
)
from pivy_stealth.crypto.signer import StealthSigner, verify_signature
from pivy_stealth.crypto.stealth import (
    compute_tweak,
    derive_stealth_public_key,
    derive_stealth_scalar,
    derive_stealth_signer,
    verify_derivation,
)

__all__ = [
    # Arithmetic
    "BASE_POINT",
    "ED25519_L",
    "clamp_scalar",
    "decode_point",
    "encode_point",
    "is_valid_point",
    "point_add",
    "point_multiply",
    "public_key_from_seed",
    "reduce_mod",
    "scalar_from_seed",
    # Shared secret
    "ecdh",
    "shared_secret_from_scalar",
    # Memo cipher
    "MEMO_LENGTH",
    "RandomSource",
    "encrypt_ephemeral_key",
    "decrypt_ephemeral_key",
    # Derivation
    "compute_tweak",
    "derive_stealth_public_key",
    "derive_stealth_scalar",
    "derive_stealth_signer",
    "verify_derivation",
    # Signing
    "StealthSigner",
    "verify_signature",
]
