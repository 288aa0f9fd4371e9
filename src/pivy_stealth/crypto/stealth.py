"""
Stealth key derivation: one-time destination keys from a recipient's meta keys.

Mathematical foundation:
    shared = ecdh(e, V)              e = ephemeral private seed, V = meta-view public key
    t      = int(SHA-256(shared)) mod L      (big-endian digest)

    Payer   (point addition):   S = A + t·G           A = meta-spend public key
    Receiver (scalar addition): s = a + t mod L,  S' = s·G
                                                      a = scalar_from_seed(meta-spend seed)

    Since A = a·G, S == S'. Both paths are always computed on the receiver
    side and compared before the scalar is trusted.

The receiver learns e by decrypting the payment memo with its meta-view
private key (ecdh(v, E) == ecdh(e, V)), then runs the same tweak formula as
the payer.

Meta-spend scalar convention:
    a is the standard RFC 8032 secret scalar of the meta-spend seed, so the
    meta-spend public key published by any Ed25519 wallet is a·G. Reading the
    raw seed bytes as the scalar would produce a different, unmatched key.
"""

from __future__ import annotations

import hashlib
import hmac
import logging

from pivy_stealth.crypto.ecdh import ecdh
from pivy_stealth.crypto.ed25519 import (
    decode_point,
    encode_point,
    int_to_bytes_le,
    point_add,
    point_multiply,
    public_key_from_seed,
    reduce_mod,
    scalar_from_seed,
)
from pivy_stealth.crypto.signer import StealthSigner
from pivy_stealth.encoding import KeyLike, to_key_bytes
from pivy_stealth.exceptions import InvalidKeyMaterial, KeyMismatchError

logger = logging.getLogger("pivy_stealth.stealth")


def compute_tweak(shared: bytes) -> int:
    """Scalar tweak t = SHA-256(shared) read big-endian, reduced mod L."""
    return reduce_mod(int.from_bytes(hashlib.sha256(shared).digest(), "big"))


def _apply_tweak(meta_spend_pub: bytes, tweak: int) -> bytes:
    # t·G is the identity for t == 0, which has no encoding
    if tweak == 0:
        return encode_point(decode_point(meta_spend_pub))
    return point_add(meta_spend_pub, point_multiply(tweak))


def derive_stealth_public_key(
    meta_spend_pub: KeyLike,
    meta_view_pub: KeyLike,
    eph_priv: KeyLike,
) -> bytes:
    """
    Payer path: compute the one-time stealth public key S = A + t·G.

    Needs only the recipient's public meta keys and the payer's own
    ephemeral private seed.

    Args:
        meta_spend_pub: recipient meta-spend public key A.
        meta_view_pub: recipient meta-view public key V.
        eph_priv: payer's ephemeral private seed e.

    Returns:
        32-byte stealth public key.
    """
    tweak = compute_tweak(ecdh(eph_priv, meta_view_pub))
    return _apply_tweak(to_key_bytes(meta_spend_pub, "meta_spend_pub"), tweak)


def verify_derivation(pub_from_point_add: bytes, pub_from_scalar: bytes) -> bool:
    """Compare the two independently derived stealth public keys."""
    return hmac.compare_digest(bytes(pub_from_point_add), bytes(pub_from_scalar))


def derive_stealth_scalar(
    meta_spend_priv: KeyLike,
    meta_view_pub: KeyLike,
    eph_priv: KeyLike,
    meta_spend_pub: KeyLike | None = None,
) -> tuple[bytes, bytes]:
    """
    Receiver path: compute the stealth scalar s = a + t mod L and S = s·G.

    Run only after the memo has been decrypted (eph_priv comes from
    decrypt_ephemeral_key). The result is cross-checked against the payer's
    point-addition path before it is returned.

    Args:
        meta_spend_priv: recipient meta-spend private seed.
        meta_view_pub: recipient meta-view public key.
        eph_priv: decrypted ephemeral private seed.
        meta_spend_pub: the meta-spend public key the payer was given. When
            omitted it is recomputed from meta_spend_priv.

    Returns:
        (scalar, stealth_pub): 32-byte little-endian scalar and 32-byte point.

    Raises:
        KeyMismatchError: if the two derivation paths disagree.
    """
    if meta_spend_pub is None:
        meta_spend_pub = public_key_from_seed(meta_spend_priv)

    tweak = compute_tweak(ecdh(eph_priv, meta_view_pub))
    expected_pub = _apply_tweak(to_key_bytes(meta_spend_pub, "meta_spend_pub"), tweak)

    s = reduce_mod(scalar_from_seed(meta_spend_priv) + tweak)
    if s == 0:
        raise InvalidKeyMaterial("Stealth scalar reduced to zero")
    derived_pub = point_multiply(s)

    if not verify_derivation(expected_pub, derived_pub):
        logger.error(
            f"Stealth derivation mismatch: point-add {expected_pub.hex()[:16]}... "
            f"vs scalar {derived_pub.hex()[:16]}..."
        )
        raise KeyMismatchError(
            "Math mismatch: scalar-derived stealth key differs from point-addition key",
            expected=expected_pub,
            derived=derived_pub,
        )

    return int_to_bytes_le(s), derived_pub


def derive_stealth_signer(
    meta_spend_priv: KeyLike,
    meta_view_pub: KeyLike,
    eph_priv: KeyLike,
    meta_spend_pub: KeyLike | None = None,
) -> StealthSigner:
    """Derive the stealth scalar and wrap it in a signer that owns it."""
    scalar, stealth_pub = derive_stealth_scalar(
        meta_spend_priv, meta_view_pub, eph_priv, meta_spend_pub
    )
    signer = StealthSigner(scalar)
    logger.debug(f"Derived stealth signer for {signer.public_key_base58[:12]}...")
    return signer
