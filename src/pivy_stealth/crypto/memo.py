"""
Ephemeral-key cipher: carries the payer's ephemeral private key to the
recipient inside a payment memo.

Wire format (88 bytes, Base58 on the wire):

    nonce (24 bytes, random) ‖ ciphertext (64 bytes)
    ciphertext = (eph_priv ‖ eph_pub) XOR tile(SHA-256(ecdh(eph_priv, view_pub)))

The nonce is carried for layout compatibility only. It takes no part in key
derivation or the integrity check, so flipping nonce bits goes undetected.
The single integrity check is recomputing eph_pub from the decrypted eph_priv;
there is no MAC. An authenticated construction (XChaCha20-Poly1305 keyed by
the shared secret, with this nonce) would close the gap, at the cost of a new
memo format.
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Callable

from pivy_stealth.crypto.ecdh import ecdh
from pivy_stealth.crypto.ed25519 import public_key_from_seed
from pivy_stealth.encoding import KEY_LENGTH, KeyLike, b58decode, b58encode, to_key_bytes
from pivy_stealth.exceptions import MemoIntegrityError

RandomSource = Callable[[int], bytes]
"""Cryptographically secure byte source, e.g. ``secrets.token_bytes``."""

NONCE_LENGTH = 24
PLAINTEXT_LENGTH = 2 * KEY_LENGTH
MEMO_LENGTH = NONCE_LENGTH + PLAINTEXT_LENGTH


def _keystream(shared: bytes) -> bytes:
    return hashlib.sha256(shared).digest()


def _xor(data: bytes, keystream: bytes) -> bytes:
    n = len(keystream)
    return bytes(b ^ keystream[i % n] for i, b in enumerate(data))


def encrypt_ephemeral_key(
    eph_priv: KeyLike,
    recipient_view_pub: KeyLike,
    random_bytes: RandomSource,
) -> str:
    """
    Encrypt an ephemeral private key for the owner of recipient_view_pub.

    Args:
        eph_priv: 32-byte ephemeral private seed.
        recipient_view_pub: recipient's meta-view public key.
        random_bytes: source for the 24-byte transport nonce.

    Returns:
        Base58 memo string (88 bytes decoded).
    """
    eph_priv = to_key_bytes(eph_priv, "eph_priv")
    shared = ecdh(eph_priv, recipient_view_pub)

    plaintext = eph_priv + public_key_from_seed(eph_priv)
    ciphertext = _xor(plaintext, _keystream(shared))

    nonce = random_bytes(NONCE_LENGTH)
    if len(nonce) != NONCE_LENGTH:
        raise ValueError(
            f"Random source returned {len(nonce)} bytes, expected {NONCE_LENGTH}"
        )
    return b58encode(nonce + ciphertext)


def decrypt_ephemeral_key(
    memo: str | bytes,
    recipient_view_priv: KeyLike,
    eph_pub: KeyLike,
) -> bytes:
    """
    Recover the ephemeral private key from a memo.

    Args:
        memo: Base58 memo string, or its 88 raw bytes.
        recipient_view_priv: recipient's meta-view private seed.
        eph_pub: ephemeral public key announced alongside the payment.

    Returns:
        The 32-byte ephemeral private seed.

    Raises:
        MemoIntegrityError: if the memo is undecodable, has the wrong length,
            or decrypts to a private key whose public key is not the one
            carried in the memo and announced with the payment.
        InvalidKeyMaterial: if the view key or eph_pub is malformed.
    """
    if isinstance(memo, str):
        try:
            payload = b58decode(memo)
        except ValueError as e:
            raise MemoIntegrityError(f"Memo is not valid Base58: {e}") from None
    else:
        payload = bytes(memo)

    if len(payload) != MEMO_LENGTH:
        raise MemoIntegrityError(
            f"Memo is {len(payload)} bytes, expected {MEMO_LENGTH}"
        )

    eph_pub = to_key_bytes(eph_pub, "eph_pub")
    ciphertext = payload[NONCE_LENGTH:]

    shared = ecdh(recipient_view_priv, eph_pub)
    plaintext = _xor(ciphertext, _keystream(shared))

    recovered_priv = plaintext[:KEY_LENGTH]
    recovered_pub = plaintext[KEY_LENGTH:]
    computed_pub = public_key_from_seed(recovered_priv)

    if not hmac.compare_digest(computed_pub, recovered_pub):
        raise MemoIntegrityError("Decryption failed: ephemeral public key mismatch")
    if not hmac.compare_digest(computed_pub, eph_pub):
        raise MemoIntegrityError("Memo was not issued for the announced ephemeral key")

    return recovered_priv
