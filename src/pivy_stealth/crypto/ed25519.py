"""
Ed25519 scalar and point arithmetic for stealth-address derivation.

Provides:
- reduce_mod / clamp_scalar / scalar_from_seed: scalar handling mod L
- point_multiply / point_add: group operations on 32-byte encodings
- decode_point / encode_point: RFC 8032 compressed point codec

Mathematical foundation:
    Edwards curve  -x² + y² = 1 + d·x²·y²  over GF(2^255 - 19)
    Base point G of prime order L = 2^252 + 27742317777372353535851937790883648493
    Public key of a seed:  A = scalar_from_seed(seed)·G

Conventions:
    Scalars are 32-byte little-endian integers.
    Points are 32-byte compressed encodings (little-endian y, sign of x in
    the top bit of the last byte).

References:
    [RFC8032] Josefsson & Liusvaara, "Edwards-Curve Digital Signature
              Algorithm (EdDSA)", §5.1.
"""

from __future__ import annotations

import hashlib

import ecdsa.ellipticcurve as ec
from ecdsa.eddsa import curve_ed25519, generator_ed25519
from ecdsa.errors import MalformedPointError

from pivy_stealth.encoding import KEY_LENGTH, KeyLike, to_key_bytes
from pivy_stealth.exceptions import InvalidKeyMaterial

# ==============================================================================
# Ed25519 constants
# ==============================================================================

# Field prime
ED25519_P = 2**255 - 19

# Order of the base-point subgroup
ED25519_L = 2**252 + 27742317777372353535851937790883648493

# Base point (compressed)
BASE_POINT = bytes(generator_ed25519.to_bytes())


# ==============================================================================
# Scalar utilities
# ==============================================================================


def reduce_mod(x: int, n: int = ED25519_L) -> int:
    """Reduce x into [0, n), also for negative x."""
    return ((x % n) + n) % n


def bytes_to_int_le(data: bytes) -> int:
    return int.from_bytes(data, "little")


def int_to_bytes_le(x: int) -> bytes:
    """Encode a reduced scalar as 32 little-endian bytes."""
    return x.to_bytes(KEY_LENGTH, "little")


def clamp_scalar(data: bytes) -> bytes:
    """
    Apply RFC 8032 clamping to 32 bytes of scalar material.

    Clears the three low bits (cofactor 8), clears bit 255 and sets bit 254.
    """
    if len(data) != KEY_LENGTH:
        raise InvalidKeyMaterial(f"Expected {KEY_LENGTH} bytes, got {len(data)}")
    clamped = bytearray(data)
    clamped[0] &= 248
    clamped[31] &= 127
    clamped[31] |= 64
    return bytes(clamped)


def clamped_scalar_from_seed(seed: KeyLike) -> int:
    """
    The clamped secret scalar of a seed, *not* reduced mod L.

    X25519 multiplies by this exact value; reducing it would re-introduce a
    small-subgroup component for points outside the prime-order subgroup.
    """
    digest = hashlib.sha512(to_key_bytes(seed, "seed")).digest()
    return bytes_to_int_le(clamp_scalar(digest[:32]))


def scalar_from_seed(seed: KeyLike) -> int:
    """
    Standard Ed25519 secret scalar of a 32-byte seed (RFC 8032 §5.1.5).

    a = clamp(SHA-512(seed)[0:32]) interpreted little-endian, reduced mod L.
    """
    return reduce_mod(clamped_scalar_from_seed(seed))


# ==============================================================================
# Point utilities
# ==============================================================================


def decode_point(data: KeyLike) -> ec.PointEdwards:
    """
    Decode a 32-byte compressed Ed25519 point.

    Raises:
        InvalidKeyMaterial: if the encoding is malformed or not on the curve.
    """
    raw = to_key_bytes(data, "point")
    try:
        return ec.PointEdwards.from_bytes(curve_ed25519, raw)
    except MalformedPointError as e:
        raise InvalidKeyMaterial(f"Not a valid Ed25519 point: {raw.hex()}") from e


def encode_point(pt: ec.AbstractPoint) -> bytes:
    """
    Encode a point as 32 compressed bytes.

    Raises:
        InvalidKeyMaterial: if the point is the identity.
    """
    if pt == ec.INFINITY:
        raise InvalidKeyMaterial("Cannot encode the identity point")
    # ecdsa encodes to a mutable bytearray
    return bytes(pt.to_bytes())


def is_valid_point(data: KeyLike) -> bool:
    """Check whether data decodes to a curve point, without raising."""
    try:
        decode_point(data)
        return True
    except InvalidKeyMaterial:
        return False


def point_multiply(scalar: int, point: KeyLike = BASE_POINT) -> bytes:
    """
    Compute scalar·P and return its encoding.

    Multiplication by the base point goes through the library's precomputed
    generator table; any other point is decoded first.

    Raises:
        InvalidKeyMaterial: if the point is malformed or the product is the
            identity (scalar ≡ 0, or a low-order input point).
    """
    if scalar < 0:
        raise InvalidKeyMaterial("Scalar must be non-negative")
    raw = to_key_bytes(point, "point")
    pt = generator_ed25519 if raw == BASE_POINT else decode_point(raw)
    return encode_point(pt * scalar)


def point_add(p1: KeyLike, p2: KeyLike) -> bytes:
    """Compute P1 + P2 and return its encoding."""
    return encode_point(decode_point(p1) + decode_point(p2))


def public_key_from_seed(seed: KeyLike) -> bytes:
    """Standard Ed25519 public key of a 32-byte seed."""
    return point_multiply(scalar_from_seed(seed))
