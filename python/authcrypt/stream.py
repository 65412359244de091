"""
authcrypt Stream - Keystream cipher over the forward-secure generator.

The generator is reseeded per message from nonce || key, so every nonce
gets its own keystream under a fixed key. Encryption and decryption are
the same XOR operation.

WARNING:
    Calling set_nonce() with the same nonce more than once on one key
    reuses the keystream. KeystreamCipher does not check for this;
    nonce uniqueness is the caller's responsibility.

Example:
    >>> from authcrypt.stream import KeystreamCipher
    >>> cipher = KeystreamCipher(os.urandom(24))
    >>> cipher.set_nonce(nonce)
    >>> ciphertext = cipher.crypt_bytes(b"data")
    >>> cipher.set_nonce(nonce)
    >>> cipher.crypt_bytes(ciphertext)
    b'data'
"""

import logging
from typing import Optional

from authcrypt.prf import PRF, DEFAULT_PRF
from authcrypt.prgen import ForwardSecureGenerator, SEED_SIZE

logger = logging.getLogger(__name__)

# Sizes in bytes
KEY_SIZE = 24
NONCE_SIZE = 8

assert NONCE_SIZE + KEY_SIZE == SEED_SIZE, "nonce || key must fill a generator seed"


class KeystreamCipher:
    """
    Symmetric stream cipher: output[i] = input[i] XOR keystream[i].

    Draws exactly one generator byte per input byte, in order.
    """

    def __init__(self, key: bytes, prf: PRF = DEFAULT_PRF):
        """
        Initialize with cipher key.

        Args:
            key: 24-byte cipher key
            prf: PRF driving the generator

        Raises:
            ValueError: If key is not 24 bytes
        """
        if len(key) != KEY_SIZE:
            raise ValueError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")

        self._key = bytes(key)
        self._prf = prf
        self._generator: Optional[ForwardSecureGenerator] = None

    def set_nonce(self, nonce: bytes, offset: int = 0) -> None:
        """
        Reset to a fresh keystream for a new nonce.

        Args:
            nonce: Buffer holding the nonce at nonce[offset:offset + 8]
            offset: Start of the nonce within the buffer

        Raises:
            ValueError: If fewer than 8 bytes are available at offset
        """
        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")

        value = bytes(nonce[offset : offset + NONCE_SIZE])
        if len(value) != NONCE_SIZE:
            raise ValueError(
                f"Nonce must be {NONCE_SIZE} bytes, got {len(value)} at offset {offset}"
            )

        self._generator = ForwardSecureGenerator(value + self._key, self._prf)

    def crypt_byte(self, value: int) -> int:
        """Encrypt/decrypt the next byte in the stream."""
        return value ^ self._require_generator().next_byte()

    def crypt_bytes(self, data: bytes) -> bytes:
        """
        Encrypt/decrypt a run of bytes.

        Args:
            data: Plaintext or ciphertext

        Returns:
            New bytes of the same length
        """
        generator = self._require_generator()
        logger.debug("Transforming %d bytes", len(data))
        return bytes(b ^ generator.next_byte() for b in data)

    def reset(self) -> None:
        """Drop the current keystream; set_nonce() is required again."""
        self._generator = None

    def _require_generator(self) -> ForwardSecureGenerator:
        if self._generator is None:
            raise RuntimeError("set_nonce() must be called before encrypting")
        return self._generator
