"""
Client-side key derivation and sealing for pastes.

- Key derivation: PBKDF2-HMAC-SHA256 (stdlib, 100K iterations) over a random
  32-byte passphrase, optionally extended with the user's password
- Encryption: AES-256-GCM (requires `cryptography` package)

Fresh passphrase, salt and nonce are drawn for every paste, so a (key, nonce)
pair is never reused.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass

from zkpaste import (
    CIPHER_NONCE_SIZE,
    KDF_ITERATIONS,
    KDF_KEY_SIZE_BITS,
    KDF_SALT_SIZE,
    PASSPHRASE_SIZE,
)
from zkpaste.errors import EncryptionError

KEY_SIZE = KDF_KEY_SIZE_BITS // 8


def _import_cryptography():
    """Lazily import the cryptography package.

    Raises ImportError with a helpful message if not installed.
    """
    try:
        from cryptography.hazmat.primitives.ciphers.aead import AESGCM

        return AESGCM
    except ImportError:
        raise ImportError(
            "cryptography is required for paste encryption. "
            "Install with: pip install zkpaste"
        )


@dataclass(frozen=True)
class KeyMaterial:
    """Secrets for a single paste.

    Attributes:
        passphrase: The 32 random bytes shared via the URL fragment.
        salt: The 8-byte PBKDF2 salt, published in the adata.
        key: The derived 32-byte AES-256 key.
    """

    passphrase: bytes
    salt: bytes
    key: bytes

    def __repr__(self) -> str:
        return f"KeyMaterial(salt={self.salt.hex()}, passphrase=<hidden>, key=<hidden>)"


def _random_bytes(n: int) -> bytes:
    try:
        return os.urandom(n)
    except (NotImplementedError, OSError) as e:
        raise EncryptionError(f"Secure random source unavailable: {e}") from e


def generate_passphrase() -> bytes:
    return _random_bytes(PASSPHRASE_SIZE)


def generate_salt() -> bytes:
    return _random_bytes(KDF_SALT_SIZE)


def generate_nonce() -> bytes:
    return _random_bytes(CIPHER_NONCE_SIZE)


def derive_key(passphrase: bytes, password: str | None, salt: bytes) -> bytes:
    """Derive the AES-256 key with PBKDF2-HMAC-SHA256.

    The password, if any, is appended to the passphrase with no separator.

    Args:
        passphrase: The random paste passphrase.
        password: Optional user password.
        salt: 8-byte KDF salt.

    Returns:
        The 32-byte key.
    """
    if len(salt) != KDF_SALT_SIZE:
        raise EncryptionError(f"Salt must be {KDF_SALT_SIZE} bytes, got {len(salt)}")

    kdf_input = passphrase
    if password:
        kdf_input = passphrase + password.encode("utf-8")

    try:
        return hashlib.pbkdf2_hmac(
            "sha256",
            kdf_input,
            salt,
            KDF_ITERATIONS,
            dklen=KEY_SIZE,
        )
    except ValueError as e:
        raise EncryptionError(f"Key derivation failed: {e}") from e


def derive(password: str | None = None) -> KeyMaterial:
    """Generate a fresh passphrase and salt and derive the paste key."""
    passphrase = generate_passphrase()
    salt = generate_salt()
    key = derive_key(passphrase, password, salt)
    return KeyMaterial(passphrase=passphrase, salt=salt, key=key)


def _check_key_and_nonce(key: bytes, nonce: bytes) -> None:
    if len(key) != KEY_SIZE:
        raise EncryptionError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    if len(nonce) != CIPHER_NONCE_SIZE:
        raise EncryptionError(f"Nonce must be {CIPHER_NONCE_SIZE} bytes, got {len(nonce)}")


def seal(key: bytes, nonce: bytes, aad: bytes, plaintext: bytes) -> bytes:
    """Encrypt with AES-256-GCM.

    Args:
        key: 32-byte key.
        nonce: 12-byte nonce, never reused with the same key.
        aad: Associated data, authenticated but not encrypted.
        plaintext: Data to encrypt.

    Returns:
        Ciphertext with the 16-byte GCM tag appended.
    """
    AESGCM = _import_cryptography()
    _check_key_and_nonce(key, nonce)
    return AESGCM(key).encrypt(nonce, plaintext, aad)


def open_sealed(key: bytes, nonce: bytes, aad: bytes, sealed: bytes) -> bytes:
    """Decrypt and authenticate the output of seal().

    Raises:
        EncryptionError: If the key or nonce is malformed, or the ciphertext,
            tag or associated data was tampered with.
    """
    AESGCM = _import_cryptography()
    from cryptography.exceptions import InvalidTag

    _check_key_and_nonce(key, nonce)
    try:
        return AESGCM(key).decrypt(nonce, sealed, aad)
    except InvalidTag:
        raise EncryptionError("Decryption failed: wrong key or tampered data") from None
