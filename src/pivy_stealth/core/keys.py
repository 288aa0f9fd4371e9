"""
Keypairs: meta keys (long-lived recipient identity) and ephemeral keys
(one per payment).

Private keys are 32-byte Ed25519 seeds, public keys the standard Ed25519
public key of the seed. Randomness is always supplied by the caller so that
tests can run from fixed seeds.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pivy_stealth.core.models import MetaAddress
from pivy_stealth.crypto.ed25519 import public_key_from_seed
from pivy_stealth.crypto.memo import RandomSource
from pivy_stealth.encoding import KEY_LENGTH, KeyLike, b58encode, to_key_bytes


@dataclass(frozen=True)
class Keypair:
    """
    An Ed25519 seed and its public key.

    Attributes:
        private_key: 32-byte seed (kept out of repr).
        public_key: 32-byte compressed point.
    """
    private_key: bytes = field(repr=False)
    public_key: bytes

    @classmethod
    def from_seed(cls, seed: KeyLike) -> Keypair:
        """Rebuild a keypair from its seed (raw, hex or Base58)."""
        seed = to_key_bytes(seed, "seed")
        return cls(private_key=seed, public_key=public_key_from_seed(seed))

    @classmethod
    def generate(cls, random_bytes: RandomSource) -> Keypair:
        """Create a fresh keypair from the supplied random source."""
        seed = random_bytes(KEY_LENGTH)
        if len(seed) != KEY_LENGTH:
            raise ValueError(
                f"Random source returned {len(seed)} bytes, expected {KEY_LENGTH}"
            )
        return cls.from_seed(seed)

    @property
    def public_key_base58(self) -> str:
        return b58encode(self.public_key)

    @property
    def private_key_hex(self) -> str:
        return self.private_key.hex()


@dataclass(frozen=True)
class MetaKeys:
    """
    A recipient's two long-lived keypairs.

    The spend key authorizes spending from stealth addresses; the view key
    only lets its holder recognize and decrypt incoming payments.
    """
    spend: Keypair
    view: Keypair

    @classmethod
    def generate(cls, random_bytes: RandomSource) -> MetaKeys:
        return cls(
            spend=Keypair.generate(random_bytes),
            view=Keypair.generate(random_bytes),
        )

    @classmethod
    def from_seeds(cls, spend_seed: KeyLike, view_seed: KeyLike) -> MetaKeys:
        return cls(spend=Keypair.from_seed(spend_seed), view=Keypair.from_seed(view_seed))

    @property
    def meta_address(self) -> MetaAddress:
        """The public identity a payer needs: both public keys in Base58."""
        return MetaAddress(
            meta_spend_pub=self.spend.public_key_base58,
            meta_view_pub=self.view.public_key_base58,
        )
