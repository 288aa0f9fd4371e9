"""
Key and memo encodings used at the API boundary.

Keys travel in three shapes:
  - raw 32-byte strings (internal representation)
  - 64-character hex (how private seeds are usually stored)
  - Base58 (how public keys and memos are shown on the ledger)

Everything is normalized to raw bytes before it reaches the crypto layer.
"""

from __future__ import annotations

import re

from pivy_stealth.exceptions import InvalidKeyMaterial

KEY_LENGTH = 32
LABEL_LENGTH = 32

# Base58 alphabet (same as Bitcoin / Solana)
_ALPHABET = b"123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_ALPHABET_MAP = {char: i for i, char in enumerate(_ALPHABET)}

_HEX_KEY_RE = re.compile(r"^[0-9a-fA-F]{64}$")

KeyLike = bytes | bytearray | memoryview | str


def b58decode(s: str) -> bytes:
    """
    Decode a Base58-encoded string to bytes.

    Raises:
        ValueError: if the string contains a character outside the alphabet.
    """
    raw = s.encode("ascii", errors="replace")
    n = 0
    for char in raw:
        digit = _ALPHABET_MAP.get(char)
        if digit is None:
            raise ValueError(f"Invalid Base58 character: {chr(char)!r}")
        n = n * 58 + digit

    if n == 0:
        result = b""
    else:
        byte_length = (n.bit_length() + 7) // 8
        result = n.to_bytes(byte_length, "big")

    # Each leading '1' in Base58 is a 0x00 byte
    pad_size = 0
    for char in raw:
        if char == _ALPHABET[0]:
            pad_size += 1
        else:
            break

    return b"\x00" * pad_size + result


def b58encode(data: bytes) -> str:
    """Encode bytes to a Base58 string."""
    n = int.from_bytes(data, "big")
    result = []
    while n > 0:
        n, remainder = divmod(n, 58)
        result.append(_ALPHABET[remainder:remainder + 1])
    result.reverse()

    pad_size = 0
    for byte in data:
        if byte == 0:
            pad_size += 1
        else:
            break

    return (b"1" * pad_size + b"".join(result)).decode("ascii")


def to_key_bytes(raw: KeyLike, name: str = "key") -> bytes:
    """
    Normalize a 32-byte key given as bytes, hex or Base58.

    A 64-character hex string is always read as hex; any other string is read
    as Base58.

    Args:
        raw: the key in any supported encoding.
        name: label used in error messages ("meta_view_pub", ...).

    Returns:
        The 32 raw key bytes.

    Raises:
        InvalidKeyMaterial: if the key cannot be decoded or is not 32 bytes.
    """
    if isinstance(raw, (bytes, bytearray, memoryview)):
        data = bytes(raw)
    elif isinstance(raw, str):
        text = raw.strip()
        if _HEX_KEY_RE.match(text):
            data = bytes.fromhex(text)
        else:
            try:
                data = b58decode(text)
            except ValueError as e:
                raise InvalidKeyMaterial(f"{name}: {e}") from None
    else:
        raise InvalidKeyMaterial(
            f"{name}: unsupported key type {type(raw).__name__}"
        )

    if len(data) != KEY_LENGTH:
        raise InvalidKeyMaterial(
            f"{name}: expected {KEY_LENGTH} bytes, got {len(data)}"
        )
    return data


def key_to_base58(key: bytes) -> str:
    """Base58 form of a 32-byte key, as shown on the ledger."""
    return b58encode(to_key_bytes(key))


def encode_label(label: str | bytes) -> bytes:
    """
    Pack a payment label into the fixed 32-byte field carried by announcements.

    Shorter labels are zero-padded on the right.

    Raises:
        ValueError: if the UTF-8 encoding is longer than 32 bytes.
    """
    data = label.encode("utf-8") if isinstance(label, str) else bytes(label)
    if len(data) > LABEL_LENGTH:
        raise ValueError(
            f"Label is {len(data)} bytes, maximum is {LABEL_LENGTH}"
        )
    return data.ljust(LABEL_LENGTH, b"\x00")


def decode_label(field: bytes) -> str:
    """Inverse of encode_label: strip the zero padding and decode UTF-8."""
    return bytes(field).rstrip(b"\x00").decode("utf-8", errors="replace")
