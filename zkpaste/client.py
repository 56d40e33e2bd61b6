"""
Paste creation client.

Workflow of create_paste():
    1. Derive a fresh key from a random passphrase (+ password)
    2. Serialize, compress and seal the content with AES-256-GCM
    3. POST {"v": 2, "adata", "ct", "meta"} to <url>/api/new
    4. Return id, url and delete token, plus the base58 passphrase

Only the round trip is retried. A well-formed rejection (non-zero "status")
is never retried, since the server may already have stored the paste.

Uses stdlib urllib.request for HTTP.
"""

from __future__ import annotations

import http.client
import json
import logging
import time
import urllib.error
import urllib.request
from dataclasses import dataclass, field, fields
from typing import Any

from zkpaste import (
    DEFAULT_API_PATH,
    DEFAULT_EXPIRE,
    DEFAULT_FORMATTER,
    DEFAULT_INITIAL_DELAY,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PASTE_URL,
    DEFAULT_TIMEOUT,
    EXPIRE_CHOICES,
    FORMATTER_CHOICES,
    __version__,
    base58,
)
from zkpaste.codec import (
    PasteContent,
    build_adata,
    build_payload,
    build_plaintext,
    encode_adata,
    encode_payload,
)
from zkpaste.crypto import derive, generate_nonce, seal
from zkpaste.errors import (
    ApiError,
    InvalidOptions,
    InvalidResponse,
    PasteError,
    TransportError,
)

log = logging.getLogger(__name__)

_HEADERS = {
    "X-Requested-With": "JSONHttpRequest",
    "Content-Type": "application/json",
    "User-Agent": f"zkpaste/{__version__}",
}

# Empty or non-JSON bodies with these statuses are transient server failures
_EMPTY_BODY_MESSAGES = {
    500: "Server internal error (500) - The server encountered an error processing your request",
    502: "Bad gateway (502) - The server received an invalid response from upstream",
    503: "Service unavailable (503) - The server is temporarily unable to handle your request",
}

_REQUIRED_FIELDS = ("id", "url", "deletetoken")


@dataclass(frozen=True)
class PasteOptions:
    url: str = DEFAULT_PASTE_URL
    password: str | None = field(default=None, repr=False)
    expire: str = DEFAULT_EXPIRE
    formatter: str = DEFAULT_FORMATTER
    burn: bool = False
    opendiscussion: bool = False
    compress: bool = True
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay: float = DEFAULT_INITIAL_DELAY
    timeout: float = DEFAULT_TIMEOUT
    api_path: str = DEFAULT_API_PATH

    @classmethod
    def from_settings(cls, settings: Any, **overrides: Any) -> PasteOptions:
        """Build options from a PasteSettings, with per-call overrides."""
        values = {f.name: getattr(settings, f.name) for f in fields(settings)}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass(frozen=True)
class PasteHandle:
    """A created paste. shareable_secret is the only way to read it back."""

    id: str
    url: str
    delete_token: str
    shareable_secret: str = field(repr=False)

    def share_link(self, base_url: str) -> str:
        if self.url.startswith(("http://", "https://")):
            return f"{self.url}#{self.shareable_secret}"
        sep = "" if self.url.startswith("/") else "/"
        return f"{base_url.rstrip('/')}{sep}{self.url}#{self.shareable_secret}"

    def delete_link(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/?pasteid={self.id}&deletetoken={self.delete_token}"


def _validate_options(options: PasteOptions) -> None:
    if options.expire not in EXPIRE_CHOICES:
        raise InvalidOptions(
            f"Invalid expire {options.expire!r}; expected one of {', '.join(EXPIRE_CHOICES)}",
            field="expire",
        )
    if options.formatter not in FORMATTER_CHOICES:
        raise InvalidOptions(
            f"Invalid formatter {options.formatter!r}; "
            f"expected one of {', '.join(FORMATTER_CHOICES)}",
            field="formatter",
        )
    if options.max_retries < 1:
        raise InvalidOptions("max_retries must be at least 1", field="max_retries")


def _endpoint(options: PasteOptions) -> str:
    """Validate the base URL and join it with the API path."""
    if not options.url.startswith(("http://", "https://")):
        raise InvalidOptions(f"Invalid URL: {options.url}", field="url")
    if not options.api_path:
        return options.url
    return f"{options.url.rstrip('/')}/{options.api_path.lstrip('/')}"


def _split_errors(raw: Any) -> list[str]:
    """Turn a server "errors"/"message" field into discrete error strings."""
    if isinstance(raw, list):
        return [str(item).strip() for item in raw if str(item).strip()]
    if not raw:
        return []
    return [part.strip() for part in str(raw).split(".") if part.strip()]


def _post(endpoint: str, body: bytes, timeout: float) -> tuple[int, str]:
    """POST the payload and return (status, body text).

    HTTP error statuses are returned, not raised, so their bodies can be
    classified. Raises TransportError if no response was received.
    """
    req = urllib.request.Request(endpoint, data=body, headers=_HEADERS, method="POST")
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.status, resp.read().decode("utf-8", errors="replace")
    except urllib.error.HTTPError as e:
        try:
            text = e.read().decode("utf-8", errors="replace")
        except (OSError, http.client.HTTPException):
            text = ""
        return e.code, text
    except urllib.error.URLError as e:
        raise TransportError(f"Connection failed: {e.reason}", url=endpoint) from e
    except (OSError, http.client.HTTPException) as e:
        raise TransportError(f"Request failed: {e}", url=endpoint) from e


def _unreadable_body(status: int, text: str, reason: str) -> PasteError:
    """Error for a body that is not a JSON object.

    An HTTP error status makes this a server failure (retried for 500/502/503,
    which proxies often answer with an HTML page); on success statuses the
    body itself is malformed.
    """
    if status >= 400:
        message = _EMPTY_BODY_MESSAGES.get(status, f"HTTP error {status} with unparseable body")
        return ApiError(
            f"{message} (Status: {status})",
            status=status,
            body=text,
            transient=status in _EMPTY_BODY_MESSAGES,
        )
    return InvalidResponse(reason, body=text)


def _parse_response(status: int, text: str) -> dict[str, Any]:
    """Classify a response body. Returns the parsed JSON on success."""
    if not text.strip():
        message = _EMPTY_BODY_MESSAGES.get(status, "Empty response from server")
        raise ApiError(
            f"{message} (Status: {status})",
            status=status,
            body=text,
            transient=status in _EMPTY_BODY_MESSAGES,
        )

    try:
        result = json.loads(text)
    except json.JSONDecodeError as e:
        raise _unreadable_body(status, text, f"Failed to parse response as JSON: {e}") from e
    if not isinstance(result, dict):
        raise _unreadable_body(status, text, "Response is not a JSON object")

    code = result.get("status")
    if code is not None and code != 0:
        raw = result.get("errors") or result.get("message")
        errors = _split_errors(raw)
        summary = _EMPTY_BODY_MESSAGES.get(status)
        if summary is None:
            message = result.get("message") if isinstance(result.get("message"), str) else None
            summary = f"API request failed: {message or 'Unknown error'}"
        raise ApiError(
            f"{summary} (Status: {status})",
            status=status,
            errors=errors,
            body=text,
        )

    for name in _REQUIRED_FIELDS:
        if not result.get(name):
            raise InvalidResponse(f"Missing {name} in response", body=text, field=name)

    return result


def _round_trip_with_retry(endpoint: str, body: bytes, options: PasteOptions) -> dict[str, Any]:
    """POST with exponential backoff on transport failures and bare 5xx responses."""
    attempts = options.max_retries
    error: TransportError | ApiError | None = None

    for attempt in range(1, attempts + 1):
        log.debug("POST %s (attempt %d/%d)", endpoint, attempt, attempts)
        try:
            status, text = _post(endpoint, body, options.timeout)
            log.debug("HTTP %d from %s (%d bytes)", status, endpoint, len(text))
            return _parse_response(status, text)
        except TransportError as e:
            e.attempts = attempt
            error = e
        except ApiError as e:
            if not e.transient:
                raise
            error = e

        if attempt < attempts:
            delay = options.initial_delay * 2 ** (attempt - 1)
            log.warning(
                "Attempt %d/%d failed: %s; retrying in %.1fs", attempt, attempts, error, delay,
            )
            time.sleep(delay)

    log.error("Giving up on %s after %d attempts", endpoint, attempts)
    raise error


def create_paste(content: PasteContent, options: PasteOptions | None = None) -> PasteHandle:
    """Encrypt content client-side and upload it.

    Args:
        content: Text and/or attachment to paste.
        options: Server, expiry, formatter and retry options.

    Returns:
        PasteHandle with the server id, url, delete token and the base58
        passphrase for the URL fragment.

    Raises:
        InvalidOptions, EncryptionError, TransportError, ApiError, InvalidResponse.
    """
    options = options or PasteOptions()

    if content.is_empty:
        raise InvalidOptions("No content to paste", field="content")
    _validate_options(options)

    material = derive(options.password)
    nonce = generate_nonce()

    blob, compression_type = build_plaintext(content, options.compress)
    adata = build_adata(
        nonce,
        material.salt,
        options.formatter,
        options.opendiscussion,
        options.burn,
        compression_type,
    )
    sealed = seal(material.key, nonce, encode_adata(adata), blob)
    body = encode_payload(build_payload(adata, sealed, options.expire))

    endpoint = _endpoint(options)
    result = _round_trip_with_retry(endpoint, body, options)
    log.info("Created paste %s", result["id"])

    return PasteHandle(
        id=str(result["id"]),
        url=str(result["url"]),
        delete_token=str(result["deletetoken"]),
        shareable_secret=base58.encode(material.passphrase),
    )
