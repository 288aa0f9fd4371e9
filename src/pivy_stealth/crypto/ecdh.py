"""
Diffie–Hellman shared secrets between Ed25519 keys.

The shared value is the X25519 function evaluated on Ed25519 material:

    shared = X25519(clamp(SHA-512(seed)[0:32]), u(P))
    u(P)   = (1 + y) / (1 - y) mod p      (Edwards y → Montgomery u)

Because both sides multiply the same base point by the product of their
secret scalars, ecdh(a, B) == ecdh(b, A) for matched keypairs (a, A), (b, B).
The output matches `getSharedSecret` of the noble-ed25519 family, so memos and
stealth keys interoperate with wallets built on it.
"""

from __future__ import annotations

import ecdsa.ellipticcurve as ec
from ecdsa.numbertheory import inverse_mod

from pivy_stealth.crypto.ed25519 import (
    ED25519_P,
    clamped_scalar_from_seed,
    decode_point,
)
from pivy_stealth.encoding import KEY_LENGTH, KeyLike
from pivy_stealth.exceptions import InvalidKeyMaterial


def edwards_to_montgomery_u(pt: ec.PointEdwards) -> int:
    """Montgomery u-coordinate of an Edwards point (birational map of RFC 7748)."""
    y = pt.y()
    denominator = (1 - y) % ED25519_P
    if denominator == 0:
        raise InvalidKeyMaterial("Identity point has no Montgomery u-coordinate")
    return (1 + y) * inverse_mod(denominator, ED25519_P) % ED25519_P


def ecdh(private_seed: KeyLike, public_point: KeyLike) -> bytes:
    """
    Compute the shared secret between a private seed and a public point.

    Args:
        private_seed: 32-byte Ed25519 private seed (raw, hex or Base58).
        public_point: 32-byte compressed Ed25519 public key.

    Returns:
        32-byte little-endian u-coordinate of clamp(a)·P.

    Raises:
        InvalidKeyMaterial: for malformed inputs or a low-order public point
            (the shared value would be all zeros).
    """
    return shared_secret_from_scalar(clamped_scalar_from_seed(private_seed), public_point)


def shared_secret_from_scalar(scalar: int, public_point: KeyLike) -> bytes:
    """
    X25519 on an Edwards point: the u-coordinate of scalar·P, 32 bytes little-endian.

    `scalar` is used as given (already clamped, not reduced mod L).
    """
    pt = decode_point(public_point)

    shared_pt = pt * scalar
    if shared_pt == ec.INFINITY:
        raise InvalidKeyMaterial("Public point has low order; shared secret is zero")

    u = edwards_to_montgomery_u(shared_pt)
    if u == 0:
        raise InvalidKeyMaterial("Shared secret is zero")
    return u.to_bytes(KEY_LENGTH, "little")
