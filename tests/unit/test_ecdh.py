"""
Unit tests for pivy_stealth.crypto.ecdh — shared secrets between Ed25519 keys.
"""

import pytest

from pivy_stealth.core.keys import Keypair
from pivy_stealth.crypto.ecdh import ecdh, edwards_to_montgomery_u, shared_secret_from_scalar
from pivy_stealth.crypto.ed25519 import (
    BASE_POINT,
    ED25519_P,
    bytes_to_int_le,
    clamp_scalar,
    clamped_scalar_from_seed,
    decode_point,
    point_multiply,
)
from pivy_stealth.encoding import b58encode
from pivy_stealth.exceptions import InvalidKeyMaterial

IDENTITY = b"\x01" + b"\x00" * 31
# (0, -1), the point of order 2
ORDER_TWO = (ED25519_P - 1).to_bytes(32, "little")

# RFC 7748 §6.1 (X25519 Diffie-Hellman)
ALICE_PRIV = bytes.fromhex("77076d0a7318a57d3c16c17251b26645df4c2f87ebc0992ab177fba51db92c2a")
ALICE_PUB_U = bytes.fromhex("8520f0098930a754748b7ddcb43ef75a0dbf3a0d26381af4eba4a98eaa9b4e6a")
BOB_PRIV = bytes.fromhex("5dab087e624a8a4b79e17f8b83800ee66f3bb1292618b6fd1c2f8b27ff88e0eb")
BOB_PUB_U = bytes.fromhex("de9edb7d7b7dc1b4d35b61c2ece435373f8343c85b78674dadfc7e146f882b4f")
RFC7748_SHARED = bytes.fromhex("4a5d9d5ba4ce2de1728e3bf480350f25e07e21c947d19e3376f09b3c1e161742")

# RFC 8032 §7.1, TEST 1
RFC8032_SEED = bytes.fromhex("9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60")


def _x25519_scalar(private_key: bytes) -> int:
    return bytes_to_int_le(clamp_scalar(private_key))


@pytest.fixture
def alice(make_random):
    return Keypair.generate(make_random(b"alice"))


@pytest.fixture
def bob(make_random):
    return Keypair.generate(make_random(b"bob"))


class TestECDH:

    def test_symmetric(self, alice, bob):
        """ecdh(a, B) == ecdh(b, A)."""
        assert ecdh(alice.private_key, bob.public_key) == ecdh(bob.private_key, alice.public_key)

    def test_length(self, alice, bob):
        assert len(ecdh(alice.private_key, bob.public_key)) == 32

    def test_deterministic(self, alice, bob):
        assert ecdh(alice.private_key, bob.public_key) == ecdh(alice.private_key, bob.public_key)

    def test_different_peers_differ(self, alice, bob, make_random):
        carol = Keypair.generate(make_random(b"carol"))
        assert ecdh(alice.private_key, bob.public_key) != ecdh(alice.private_key, carol.public_key)

    def test_encodings_agree(self, alice, bob):
        raw = ecdh(alice.private_key, bob.public_key)
        assert ecdh(alice.private_key.hex(), b58encode(bob.public_key)) == raw

    def test_identity_point_rejected(self, alice):
        with pytest.raises(InvalidKeyMaterial):
            ecdh(alice.private_key, IDENTITY)

    def test_low_order_point_rejected(self, alice):
        with pytest.raises(InvalidKeyMaterial):
            ecdh(alice.private_key, ORDER_TWO)

    def test_malformed_lengths(self, alice, bob):
        with pytest.raises(InvalidKeyMaterial):
            ecdh(alice.private_key[:31], bob.public_key)
        with pytest.raises(InvalidKeyMaterial):
            ecdh(alice.private_key, bob.public_key + b"\x00")


class TestMontgomeryMap:

    def test_base_point_u_is_nine(self):
        """The Ed25519 base point maps to the Curve25519 base point u = 9."""
        assert edwards_to_montgomery_u(decode_point(BASE_POINT)) == 9


class TestKnownAnswers:
    """Shared secrets pinned to RFC 7748 X25519 values."""

    def test_public_keys_map_to_rfc7748_u(self):
        """clamp(k)·G on the Edwards curve has the X25519 public u-coordinate."""
        for priv, expected_u in ((ALICE_PRIV, ALICE_PUB_U), (BOB_PRIV, BOB_PUB_U)):
            pub = decode_point(point_multiply(_x25519_scalar(priv)))
            assert edwards_to_montgomery_u(pub).to_bytes(32, "little") == expected_u

    def test_shared_secret_matches_rfc7748(self):
        alice_pub = point_multiply(_x25519_scalar(ALICE_PRIV))
        bob_pub = point_multiply(_x25519_scalar(BOB_PRIV))
        assert shared_secret_from_scalar(_x25519_scalar(ALICE_PRIV), bob_pub) == RFC7748_SHARED
        assert shared_secret_from_scalar(_x25519_scalar(BOB_PRIV), alice_pub) == RFC7748_SHARED

    def test_seed_secret_is_clamped_sha512_half(self):
        """ecdh(seed, P) is X25519 with the seed's unreduced Ed25519 scalar."""
        bob_pub = point_multiply(_x25519_scalar(BOB_PRIV))
        expected = shared_secret_from_scalar(clamped_scalar_from_seed(RFC8032_SEED), bob_pub)
        assert ecdh(RFC8032_SEED, bob_pub) == expected

    def test_zero_scalar_rejected(self):
        with pytest.raises(InvalidKeyMaterial):
            shared_secret_from_scalar(0, BASE_POINT)
