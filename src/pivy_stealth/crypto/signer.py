"""
Deterministic Ed25519 signing from a raw, already-reduced scalar.

A stealth scalar s = a + t mod L never passes through the seed → SHA-512 →
clamp pipeline, so no seed exists to build a standard keypair from. The
signer runs the RFC 8032 §5.1.6 algorithm directly on s, substituting the
scalar for the seed when deriving the nonce prefix:

    prefix = SHA-512(s)[32:64]
    r      = int_le(SHA-512(prefix ‖ M)) mod L
    R      = r·G
    k      = int_le(SHA-512(R ‖ A ‖ M)) mod L
    S      = r + k·s mod L
    sig    = R ‖ S

Signatures verify under any conformant Ed25519 verifier against A = s·G.
"""

from __future__ import annotations

import hashlib

from ecdsa.eddsa import PublicKey, generator_ed25519
from ecdsa.errors import MalformedPointError

from pivy_stealth.crypto.ed25519 import (
    ED25519_L,
    bytes_to_int_le,
    int_to_bytes_le,
    point_multiply,
    reduce_mod,
    scalar_from_seed,
)
from pivy_stealth.encoding import KeyLike, b58encode, to_key_bytes
from pivy_stealth.exceptions import InvalidKeyMaterial

SIGNATURE_LENGTH = 64


def _as_message(message: bytes | str) -> bytes:
    return message.encode("utf-8") if isinstance(message, str) else bytes(message)


class StealthSigner:
    """
    Signs on behalf of a stealth public key.

    The signer owns its scalar exclusively: it exposes the public key and a
    sign() operation, never the scalar itself.

    Usage:
        signer = derive_stealth_signer(meta_spend_priv, meta_view_pub, eph_priv)
        sig = signer.sign(tx_message_bytes)
    """

    def __init__(self, scalar: KeyLike) -> None:
        scalar_bytes = to_key_bytes(scalar, "stealth_scalar")
        s = bytes_to_int_le(scalar_bytes)
        if s == 0 or s >= ED25519_L:
            raise InvalidKeyMaterial("Stealth scalar must be in [1, L-1]")

        self.__scalar = s
        self.__prefix = hashlib.sha512(scalar_bytes).digest()[32:]
        self.__public_key = point_multiply(s)

    @classmethod
    def from_seed(cls, seed: KeyLike) -> StealthSigner:
        """
        Signer for an ordinary Ed25519 keypair.

        Takes the nonce prefix from the seed itself, so signatures are
        byte-identical to those of any RFC 8032 signer holding the same seed.
        """
        seed = to_key_bytes(seed, "seed")
        signer = cls(int_to_bytes_le(scalar_from_seed(seed)))
        signer.__prefix = hashlib.sha512(seed).digest()[32:]
        return signer

    @property
    def public_key(self) -> bytes:
        """32-byte stealth public key A = s·G."""
        return self.__public_key

    @property
    def public_key_base58(self) -> str:
        return b58encode(self.__public_key)

    def sign(self, message: bytes | str) -> bytes:
        """
        Produce a 64-byte Ed25519 signature over message.

        Deterministic: the same scalar and message always give the same bytes.
        """
        msg = _as_message(message)

        r = reduce_mod(bytes_to_int_le(hashlib.sha512(self.__prefix + msg).digest()))
        R = point_multiply(r)

        k = reduce_mod(
            bytes_to_int_le(hashlib.sha512(R + self.__public_key + msg).digest())
        )
        S = reduce_mod(r + k * self.__scalar)

        return R + int_to_bytes_le(S)

    def __repr__(self) -> str:
        return f"StealthSigner(public_key={self.public_key_base58!r})"


def verify_signature(signature: bytes, message: bytes | str, public_key: KeyLike) -> bool:
    """
    Verify a standard Ed25519 signature.

    Args:
        signature: 64-byte R ‖ S.
        message: signed message.
        public_key: 32-byte public key (raw, hex or Base58).

    Returns:
        True if the signature is valid, False otherwise.
    """
    if len(signature) != SIGNATURE_LENGTH:
        return False
    try:
        pub = PublicKey(generator_ed25519, to_key_bytes(public_key, "public_key"))
        return pub.verify(_as_message(message), bytes(signature))
    except (ValueError, MalformedPointError):
        return False

