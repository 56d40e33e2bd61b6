"""
Tests for zkpaste.crypto — PBKDF2 key derivation and AES-256-GCM sealing.

TestKeyDerivation — sizes, determinism, password mixing
TestSeal          — tag length, parameter validation, tamper detection
TestUniqueness    — fresh passphrase/salt/nonce per paste
"""

from __future__ import annotations

import hashlib
import os
from unittest.mock import patch

import pytest

from zkpaste import (
    CIPHER_NONCE_SIZE,
    CIPHER_TAG_SIZE,
    KDF_ITERATIONS,
    KDF_SALT_SIZE,
    PASSPHRASE_SIZE,
)
from zkpaste.crypto import (
    KEY_SIZE,
    derive,
    derive_key,
    generate_nonce,
    generate_passphrase,
    generate_salt,
    open_sealed,
    seal,
)
from zkpaste.errors import EncryptionError


@pytest.fixture
def key():
    return os.urandom(KEY_SIZE)


@pytest.fixture
def nonce():
    return os.urandom(CIPHER_NONCE_SIZE)


# ---------------------------------------------------------------------------
# TestKeyDerivation
# ---------------------------------------------------------------------------

class TestKeyDerivation:

    def test_constants(self):
        assert PASSPHRASE_SIZE == 32
        assert KDF_SALT_SIZE == 8
        assert KDF_ITERATIONS == 100_000
        assert KEY_SIZE == 32

    def test_derive_sizes(self):
        material = derive()
        assert len(material.passphrase) == 32
        assert len(material.salt) == 8
        assert len(material.key) == 32

    def test_matches_pbkdf2_hmac_sha256(self):
        passphrase = b"\x01" * 32
        salt = b"\x02" * 8
        expected = hashlib.pbkdf2_hmac("sha256", passphrase, salt, 100_000, dklen=32)
        assert derive_key(passphrase, None, salt) == expected

    def test_password_appended_without_separator(self):
        passphrase = b"\x01" * 32
        salt = b"\x02" * 8
        expected = hashlib.pbkdf2_hmac(
            "sha256", passphrase + "hunter2".encode(), salt, 100_000, dklen=32,
        )
        assert derive_key(passphrase, "hunter2", salt) == expected

    def test_unicode_password_utf8(self):
        passphrase = b"\x03" * 32
        salt = b"\x04" * 8
        expected = hashlib.pbkdf2_hmac(
            "sha256", passphrase + "pässwörd".encode("utf-8"), salt, 100_000, dklen=32,
        )
        assert derive_key(passphrase, "pässwörd", salt) == expected

    def test_empty_password_same_as_none(self):
        passphrase = os.urandom(32)
        salt = os.urandom(8)
        assert derive_key(passphrase, "", salt) == derive_key(passphrase, None, salt)

    def test_password_changes_key(self):
        passphrase = os.urandom(32)
        salt = os.urandom(8)
        assert derive_key(passphrase, "a", salt) != derive_key(passphrase, None, salt)

    def test_wrong_salt_size(self):
        with pytest.raises(EncryptionError, match="Salt must be 8 bytes"):
            derive_key(os.urandom(32), None, os.urandom(16))

    def test_randomness_failure_is_fatal(self):
        with patch("zkpaste.crypto.os.urandom", side_effect=NotImplementedError("no entropy")):
            with pytest.raises(EncryptionError, match="random source unavailable"):
                derive()

    def test_repr_hides_secrets(self):
        material = derive()
        text = repr(material)
        assert material.key.hex() not in text
        assert material.passphrase.hex() not in text
        assert "<hidden>" in text


# ---------------------------------------------------------------------------
# TestSeal
# ---------------------------------------------------------------------------

class TestSeal:

    def test_tag_appended(self, key, nonce):
        sealed = seal(key, nonce, b"aad", b"hello")
        assert len(sealed) == len(b"hello") + CIPHER_TAG_SIZE

    def test_roundtrip(self, key, nonce):
        sealed = seal(key, nonce, b"aad", b"secret paste")
        assert open_sealed(key, nonce, b"aad", sealed) == b"secret paste"

    def test_empty_plaintext(self, key, nonce):
        sealed = seal(key, nonce, b"", b"")
        assert len(sealed) == CIPHER_TAG_SIZE
        assert open_sealed(key, nonce, b"", sealed) == b""

    @pytest.mark.parametrize("size", [0, 16, 24, 31, 33])
    def test_wrong_key_length(self, nonce, size):
        with pytest.raises(EncryptionError, match="Key must be 32 bytes"):
            seal(os.urandom(size), nonce, b"", b"data")

    @pytest.mark.parametrize("size", [0, 8, 11, 13, 16])
    def test_wrong_nonce_length(self, key, size):
        with pytest.raises(EncryptionError, match="Nonce must be 12 bytes"):
            seal(key, os.urandom(size), b"", b"data")

    def test_tampered_ciphertext(self, key, nonce):
        sealed = bytearray(seal(key, nonce, b"aad", b"hello world"))
        sealed[0] ^= 0x01
        with pytest.raises(EncryptionError, match="tampered"):
            open_sealed(key, nonce, b"aad", bytes(sealed))

    def test_tampered_tag(self, key, nonce):
        sealed = bytearray(seal(key, nonce, b"aad", b"hello world"))
        sealed[-1] ^= 0x80
        with pytest.raises(EncryptionError):
            open_sealed(key, nonce, b"aad", bytes(sealed))

    def test_tampered_aad(self, key, nonce):
        sealed = seal(key, nonce, b'[["iv"],"plaintext",0,0]', b"hello")
        with pytest.raises(EncryptionError):
            open_sealed(key, nonce, b'[["iv"],"plaintext",0,1]', sealed)

    def test_wrong_key(self, key, nonce):
        sealed = seal(key, nonce, b"", b"hello")
        with pytest.raises(EncryptionError):
            open_sealed(os.urandom(32), nonce, b"", sealed)


# ---------------------------------------------------------------------------
# TestUniqueness
# ---------------------------------------------------------------------------

class TestUniqueness:

    TRIALS = 1000

    def test_generators_sizes(self):
        assert len(generate_passphrase()) == 32
        assert len(generate_salt()) == 8
        assert len(generate_nonce()) == 12

    def test_nonces_unique(self):
        nonces = {generate_nonce() for _ in range(self.TRIALS)}
        assert len(nonces) == self.TRIALS

    def test_derive_unique_passphrase_and_salt(self):
        # One KDF round keeps 1000 derivations fast; randomness is unaffected
        with patch("zkpaste.crypto.KDF_ITERATIONS", 1):
            materials = [derive("same password") for _ in range(self.TRIALS)]

        assert len({m.passphrase for m in materials}) == self.TRIALS
        assert len({m.salt for m in materials}) == self.TRIALS
        assert len({m.key for m in materials}) == self.TRIALS
