"""
Paste payload encoding.

Plaintext blob (encrypted):
    {"paste":<text>,"attachment":<data uri>,"attachment_name":<name>}
    absent fields are omitted, then optionally zlib-compressed

Associated data (authenticated, sent in clear):
    [[<iv_b64>,<salt_b64>,100000,256,96,"aes","gcm",<comp>],<formatter>,<0|1>,<0|1>]

The adata bytes are fed verbatim to AES-GCM, so they are always serialized
compact with a fixed element order. A decryptor rebuilds them from the
received JSON with the same separators.
"""

from __future__ import annotations

import json
import zlib
from base64 import b64encode
from dataclasses import dataclass
from typing import Any

from zkpaste import (
    CIPHER_ALGORITHM,
    CIPHER_MODE,
    CIPHER_NONCE_SIZE_BITS,
    COMPRESSION_CHOICES,
    FORMATTER_CHOICES,
    KDF_ITERATIONS,
    KDF_KEY_SIZE_BITS,
    PROTOCOL_VERSION,
)
from zkpaste.errors import InvalidOptions

_COMPACT = (",", ":")


@dataclass(frozen=True)
class Attachment:
    """A file attached to a paste."""

    name: str
    data: bytes
    mime: str = "application/octet-stream"

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime};base64,{b64encode(self.data).decode('ascii')}"


@dataclass(frozen=True)
class PasteContent:
    """Text and/or attachment to paste. At least one must be present."""

    text: str | None = None
    attachment: Attachment | None = None

    @property
    def is_empty(self) -> bool:
        return self.text is None and self.attachment is None


def _dumps(obj: Any) -> bytes:
    return json.dumps(obj, separators=_COMPACT, ensure_ascii=False).encode("utf-8")


def build_plaintext(content: PasteContent, compress: bool) -> tuple[bytes, str]:
    """Serialize the paste content and optionally compress it.

    Returns:
        (blob, compression_type) where compression_type is "zlib" or "none".
    """
    data: dict[str, str] = {}
    if content.text is not None:
        data["paste"] = content.text
    if content.attachment is not None:
        data["attachment"] = content.attachment.data_uri
        data["attachment_name"] = content.attachment.name

    blob = _dumps(data)
    if compress:
        return zlib.compress(blob), "zlib"
    return blob, "none"


def build_adata(
    nonce: bytes,
    salt: bytes,
    formatter: str,
    opendiscussion: bool,
    burn: bool,
    compression_type: str,
) -> list:
    """Build the associated-data structure for a paste."""
    if formatter not in FORMATTER_CHOICES:
        raise InvalidOptions(
            f"Invalid formatter {formatter!r}; expected one of {', '.join(FORMATTER_CHOICES)}",
            field="formatter",
        )
    if compression_type not in COMPRESSION_CHOICES:
        raise InvalidOptions(
            f"Invalid compression type {compression_type!r}", field="compression",
        )

    cipher = [
        b64encode(nonce).decode("ascii"),
        b64encode(salt).decode("ascii"),
        KDF_ITERATIONS,
        KDF_KEY_SIZE_BITS,
        CIPHER_NONCE_SIZE_BITS,  # nonce size in bits, not the tag size
        CIPHER_ALGORITHM,
        CIPHER_MODE,
        compression_type,
    ]
    return [cipher, formatter, int(bool(opendiscussion)), int(bool(burn))]


def encode_adata(adata: list) -> bytes:
    """Compact JSON bytes of the adata, exactly as authenticated by the cipher."""
    return _dumps(adata)


def build_associated_data(
    nonce: bytes,
    salt: bytes,
    formatter: str,
    opendiscussion: bool,
    burn: bool,
    compression_type: str,
) -> bytes:
    return encode_adata(
        build_adata(nonce, salt, formatter, opendiscussion, burn, compression_type)
    )


def build_payload(adata: list, sealed: bytes, expire: str) -> dict[str, Any]:
    """Assemble the JSON document POSTed to the server."""
    return {
        "v": PROTOCOL_VERSION,
        "adata": adata,
        "ct": b64encode(sealed).decode("ascii"),
        "meta": {"expire": expire},
    }


def encode_payload(payload: dict[str, Any]) -> bytes:
    return _dumps(payload)
