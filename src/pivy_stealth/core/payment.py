"""
Payer and receiver workflows built on the stealth crypto primitives.

StealthPayer turns a recipient's meta address into a one-time destination
plus the memo that lets the recipient find it again. StealthReceiver scans
announcements with the meta-view key and, when it also holds the meta-spend
key, opens a matched payment into a signer for the stealth address.
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import Iterable

from pivy_stealth.core.keys import Keypair, MetaKeys
from pivy_stealth.core.models import (
    MetaAddress,
    PaymentAnnouncement,
    ReceivedPayment,
    StealthPayment,
)
from pivy_stealth.crypto.ed25519 import public_key_from_seed
from pivy_stealth.crypto.memo import (
    RandomSource,
    decrypt_ephemeral_key,
    encrypt_ephemeral_key,
)
from pivy_stealth.crypto.signer import StealthSigner
from pivy_stealth.crypto.stealth import derive_stealth_public_key, derive_stealth_signer
from pivy_stealth.encoding import KeyLike, b58encode, to_key_bytes
from pivy_stealth.exceptions import (
    InvalidKeyMaterial,
    KeyMismatchError,
    MemoIntegrityError,
    StealthError,
)

logger = logging.getLogger("pivy_stealth.payment")


class StealthPayer:
    """
    Creates stealth payments to meta addresses.

    Args:
        random_bytes: source of randomness for ephemeral keys and memo nonces
            (secrets.token_bytes in production).
    """

    def __init__(self, random_bytes: RandomSource):
        self._random_bytes = random_bytes

    def create_payment(
        self,
        meta_address: MetaAddress,
        label: str = "",
        amount: int = 0,
        mint: str | None = None,
    ) -> StealthPayment:
        """
        Derive a fresh stealth destination for `meta_address`.

        Every call draws a new ephemeral keypair, so two payments to the same
        recipient never share a destination.

        Raises:
            InvalidKeyMaterial: if the meta address keys are malformed.
            ValueError: if the label exceeds 32 bytes or amount is negative.
        """
        if amount < 0:
            raise ValueError(f"Amount must be non-negative, got {amount}")

        meta_spend_pub = to_key_bytes(meta_address.meta_spend_pub, "meta_spend_pub")
        meta_view_pub = to_key_bytes(meta_address.meta_view_pub, "meta_view_pub")

        eph = Keypair.generate(self._random_bytes)
        stealth_pub = derive_stealth_public_key(
            meta_spend_pub, meta_view_pub, eph.private_key
        )
        memo = encrypt_ephemeral_key(eph.private_key, meta_view_pub, self._random_bytes)

        payment = StealthPayment(
            stealth_owner=b58encode(stealth_pub),
            eph_pubkey=eph.public_key_base58,
            memo=memo,
            label=label,
            amount=amount,
            mint=mint,
        )
        logger.info(
            f"Created stealth payment to {payment.stealth_owner[:12]}... "
            f"(eph {payment.eph_pubkey[:12]}...)"
        )
        return payment


class StealthReceiver:
    """
    Recognizes and opens payments addressed to one set of meta keys.

    A receiver built without `meta_spend_priv` is view-only: it can scan and
    identify payments but cannot produce signers for them.
    """

    def __init__(
        self,
        meta_view_priv: KeyLike,
        meta_spend_pub: KeyLike,
        meta_spend_priv: KeyLike | None = None,
    ):
        self._view_priv = to_key_bytes(meta_view_priv, "meta_view_priv")
        self._view_pub = public_key_from_seed(self._view_priv)
        self._spend_pub = to_key_bytes(meta_spend_pub, "meta_spend_pub")
        self._spend_priv = (
            to_key_bytes(meta_spend_priv, "meta_spend_priv")
            if meta_spend_priv is not None
            else None
        )

        if self._spend_priv is not None:
            derived = public_key_from_seed(self._spend_priv)
            if not hmac.compare_digest(derived, self._spend_pub):
                raise InvalidKeyMaterial(
                    "meta_spend_priv does not match meta_spend_pub"
                )

    @classmethod
    def from_meta_keys(cls, keys: MetaKeys) -> StealthReceiver:
        return cls(
            meta_view_priv=keys.view.private_key,
            meta_spend_pub=keys.spend.public_key,
            meta_spend_priv=keys.spend.private_key,
        )

    @property
    def can_spend(self) -> bool:
        return self._spend_priv is not None

    @property
    def meta_address(self) -> MetaAddress:
        return MetaAddress(
            meta_spend_pub=b58encode(self._spend_pub),
            meta_view_pub=b58encode(self._view_pub),
        )

    def recover_ephemeral_key(self, announcement: PaymentAnnouncement) -> bytes:
        """Decrypt the announcement's memo into the ephemeral private seed."""
        return decrypt_ephemeral_key(
            announcement.memo, self._view_priv, announcement.eph_pubkey
        )

    def _expected_owner(self, eph_priv: bytes) -> bytes:
        return derive_stealth_public_key(self._spend_pub, self._view_pub, eph_priv)

    def is_mine(self, announcement: PaymentAnnouncement) -> bool:
        """
        True if the announcement pays one of this receiver's stealth addresses.

        Raises:
            MemoIntegrityError: if the memo was not encrypted to this view key.
        """
        eph_priv = self.recover_ephemeral_key(announcement)
        owner = to_key_bytes(announcement.stealth_owner, "stealth_owner")
        return hmac.compare_digest(self._expected_owner(eph_priv), owner)

    def scan(self, announcements: Iterable[PaymentAnnouncement]) -> list[ReceivedPayment]:
        """
        Pick this receiver's payments out of a stream of announcements.

        Announcements whose memo does not decrypt under the view key belong
        to someone else and are skipped silently; malformed ones are skipped
        with a warning.
        """
        found: list[ReceivedPayment] = []
        seen = 0
        for ann in announcements:
            seen += 1
            try:
                mine = self.is_mine(ann)
            except MemoIntegrityError as e:
                logger.debug(f"Skipping {ann.stealth_owner[:12]}...: {e}")
                continue
            except InvalidKeyMaterial as e:
                logger.warning(f"Malformed announcement {ann.stealth_owner[:12]}...: {e}")
                continue

            if not mine:
                logger.debug(f"Memo decrypted but owner differs: {ann.stealth_owner[:12]}...")
                continue

            found.append(
                ReceivedPayment(
                    announcement=ann,
                    stealth_owner=ann.stealth_owner,
                    label=ann.label,
                    amount=ann.amount,
                    mint=ann.mint,
                )
            )

        logger.info(f"Scanned {seen} announcements, {len(found)} addressed to us")
        return found

    def open(self, announcement: PaymentAnnouncement) -> StealthSigner:
        """
        Build the signer that controls `announcement.stealth_owner`.

        Raises:
            StealthError: if this receiver is view-only.
            MemoIntegrityError: if the memo does not decrypt under the view key.
            KeyMismatchError: if the derived key is not the announced owner.
        """
        if self._spend_priv is None:
            raise StealthError("View-only receiver cannot open payments")

        eph_priv = self.recover_ephemeral_key(announcement)
        signer = derive_stealth_signer(
            self._spend_priv, self._view_pub, eph_priv, self._spend_pub
        )

        owner = to_key_bytes(announcement.stealth_owner, "stealth_owner")
        if not hmac.compare_digest(signer.public_key, owner):
            raise KeyMismatchError(
                "Derived stealth key does not match the announced owner",
                expected=owner,
                derived=signer.public_key,
            )
        return signer
