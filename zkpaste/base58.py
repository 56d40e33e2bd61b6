"""
Base58 (Bitcoin alphabet) for the shareable URL fragment.

Leading zero bytes are kept as leading "1" characters, so the encoding is
length-preserving for secrets that happen to start with 0x00.
"""

from __future__ import annotations

ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_INDEX = {c: i for i, c in enumerate(ALPHABET)}


def encode(data: bytes) -> str:
    """Encode bytes to a Base58 string."""
    stripped = data.lstrip(b"\x00")
    n_pad = len(data) - len(stripped)

    x = int.from_bytes(stripped, "big")
    digits = []
    while x > 0:
        x, rem = divmod(x, 58)
        digits.append(ALPHABET[rem])

    return ALPHABET[0] * n_pad + "".join(reversed(digits))


def decode(text: str) -> bytes:
    """Decode a Base58 string. Raises ValueError on characters outside the alphabet."""
    stripped = text.lstrip(ALPHABET[0])
    n_pad = len(text) - len(stripped)

    x = 0
    for c in stripped:
        try:
            x = x * 58 + _INDEX[c]
        except KeyError:
            raise ValueError(f"Invalid base58 character: {c!r}") from None

    body = x.to_bytes((x.bit_length() + 7) // 8, "big") if x else b""
    return b"\x00" * n_pad + body
