"""
zkpaste — zero-knowledge pastes for PrivateBin-compatible services.

Architecture:
    Client:  zlib(JSON paste) -> AES-256-GCM under PBKDF2(passphrase [+ password])
    Wire:    {"v": 2, "adata": [...], "ct": <b64>, "meta": {"expire": ...}}
    Link:    <base_url><url>#<base58(passphrase)>  (fragment never reaches the server)
"""

__version__ = "0.2.0"

PROTOCOL_VERSION = 2

# Key derivation
PASSPHRASE_SIZE = 32  # random secret carried in the URL fragment
KDF_SALT_SIZE = 8
KDF_ITERATIONS = 100_000
KDF_KEY_SIZE_BITS = 256

# Cipher
CIPHER_NONCE_SIZE = 12
# Fifth adata element. Historically labelled "adata size", it is the nonce
# length in bits (12 * 8), not the GCM tag length.
CIPHER_NONCE_SIZE_BITS = CIPHER_NONCE_SIZE * 8
CIPHER_TAG_SIZE = 16
CIPHER_ALGORITHM = "aes"
CIPHER_MODE = "gcm"

EXPIRE_CHOICES = (
    "5min", "10min", "1hour", "1day", "1week", "1month", "1year", "never",
)
FORMATTER_CHOICES = ("plaintext", "markdown", "syntaxhighlighting")
COMPRESSION_CHOICES = ("zlib", "none")

# Client defaults
DEFAULT_PASTE_URL = "https://snip.dssr.ch/"
DEFAULT_API_PATH = "/api/new"
DEFAULT_EXPIRE = "1month"
DEFAULT_FORMATTER = "plaintext"
DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_DELAY = 1.0  # seconds, doubled on each retry
DEFAULT_TIMEOUT = 30.0  # seconds per attempt
