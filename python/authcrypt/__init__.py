"""
authcrypt - Authenticated encryption from a PRF.

Encrypt-then-MAC over a keystream cipher driven by a forward-secure
pseudorandom generator. The PRF is pluggable; HMAC-SHA256 by default.

Usage:
    from authcrypt import AuthEncryptor, AuthDecryptor, generate_key

    key = generate_key()             # 56 bytes
    nonce = os.urandom(8)            # never reuse under one key
    out = AuthEncryptor(key).encrypt(b"data", nonce, include_nonce=True)
    plaintext = AuthDecryptor(key).decrypt(out, nonce_included=True)

    # decrypt() returns None when authentication fails

Security:
    The 56-byte key splits into a 24-byte cipher key and a 32-byte MAC key.
    Tags are compared in constant time before anything is decrypted.
"""

import logging

__version__ = "0.1.0"
__license__ = "CC0-1.0"

from authcrypt.prf import PRF, HmacSha256PRF, Blake2bPRF, DEFAULT_PRF, constant_time_equal
from authcrypt.prgen import ForwardSecureGenerator, ratchet
from authcrypt.stream import KeystreamCipher
from authcrypt.core import (
    AuthEncryptor,
    AuthDecryptor,
    KEY_SIZE,
    KEY_SPLIT_SIZE,
    MAC_KEY_SIZE,
    NONCE_SIZE,
    TAG_SIZE,
    split_key,
    generate_key,
    generate_nonce,
    quick_encrypt,
    quick_decrypt,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # PRF
    "PRF",
    "HmacSha256PRF",
    "Blake2bPRF",
    "DEFAULT_PRF",
    "constant_time_equal",
    # Generator
    "ForwardSecureGenerator",
    "ratchet",
    # Stream cipher
    "KeystreamCipher",
    # Authenticated encryption
    "AuthEncryptor",
    "AuthDecryptor",
    "split_key",
    "generate_key",
    "generate_nonce",
    "quick_encrypt",
    "quick_decrypt",
    # Sizes
    "KEY_SIZE",
    "KEY_SPLIT_SIZE",
    "MAC_KEY_SIZE",
    "NONCE_SIZE",
    "TAG_SIZE",
]
