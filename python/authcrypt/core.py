"""
authcrypt Core - Authenticated encryption (encrypt-then-MAC).

One 56-byte master key is split into a 24-byte cipher key for the
keystream cipher and a 32-byte MAC key for the PRF. The tag always covers
ciphertext || nonce, whether or not the nonce travels with the message.

Wire layout:
    include_nonce=False: ciphertext || tag
    include_nonce=True:  ciphertext || tag || nonce

Security:
    - Verify before decrypt: nothing is decrypted unless the tag matches
    - Constant-time tag comparison
    - Tag mismatch and truncated input both return None
    - Nonce uniqueness per key is the caller's responsibility
"""

import os
import logging
import threading
from typing import Optional, Tuple

from authcrypt.prf import PRF, DEFAULT_PRF, constant_time_equal
from authcrypt.stream import KeystreamCipher, KEY_SIZE as CIPHER_KEY_SIZE, NONCE_SIZE

logger = logging.getLogger(__name__)

# Sizes in bytes
KEY_SIZE = 56
KEY_SPLIT_SIZE = CIPHER_KEY_SIZE  # fixed split point, never varies
MAC_KEY_SIZE = KEY_SIZE - KEY_SPLIT_SIZE
TAG_SIZE = DEFAULT_PRF.output_size

assert MAC_KEY_SIZE == 32, "MAC key must be 256 bits"


def split_key(key: bytes) -> Tuple[bytes, bytes]:
    """
    Split a master key into (cipher_key, mac_key).

    Args:
        key: 56-byte master key

    Returns:
        First 24 bytes and remaining 32 bytes

    Raises:
        ValueError: If key is not 56 bytes
    """
    if len(key) != KEY_SIZE:
        raise ValueError(f"Key must be {KEY_SIZE} bytes, got {len(key)}")
    key = bytes(key)
    return key[:KEY_SPLIT_SIZE], key[KEY_SPLIT_SIZE:]


def _check_nonce(nonce: Optional[bytes]) -> bytes:
    if nonce is None or len(nonce) != NONCE_SIZE:
        got = "None" if nonce is None else len(nonce)
        raise ValueError(f"Nonce must be {NONCE_SIZE} bytes, got {got}")
    return bytes(nonce)


class _AuthBase:
    """Key split and per-instance state shared by encryptor and decryptor."""

    def __init__(self, key: bytes, prf: PRF = DEFAULT_PRF):
        cipher_key, self._mac_key = split_key(key)
        self._prf = prf
        self._cipher = KeystreamCipher(cipher_key, prf)
        self._lock = threading.Lock()

    @property
    def tag_size(self) -> int:
        """Tag length in bytes for this instance's PRF."""
        return self._prf.output_size

    def _mac(self, ciphertext: bytes, nonce: bytes) -> bytes:
        # Nonce after ciphertext, carried or not
        return self._prf.evaluate(self._mac_key, ciphertext + nonce)

    def _crypt(self, data: bytes, nonce: bytes) -> bytes:
        self._cipher.set_nonce(nonce)
        try:
            return self._cipher.crypt_bytes(data)
        finally:
            self._cipher.reset()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(prf={self._prf!r})"


class AuthEncryptor(_AuthBase):
    """
    Authenticated encryption of byte strings.

    Example:
        >>> ae = AuthEncryptor(key)
        >>> out = ae.encrypt(b"secret", nonce, include_nonce=True)
        >>> AuthDecryptor(key).decrypt(out, None, nonce_included=True)
        b'secret'

    A single instance is safe to share between threads; calls are
    serialised on an internal lock.
    """

    def encrypt(
        self, plaintext: bytes, nonce: bytes, include_nonce: bool = False
    ) -> bytes:
        """
        Encrypt then authenticate.

        Callers must never pass the same nonce twice under one key;
        this is not checked.

        Args:
            plaintext: Data to encrypt
            nonce: 8-byte nonce
            include_nonce: Append the nonce in the clear after the tag

        Returns:
            ciphertext || tag, or ciphertext || tag || nonce

        Raises:
            ValueError: If nonce is not 8 bytes
        """
        nonce = _check_nonce(nonce)

        with self._lock:
            ciphertext = self._crypt(plaintext, nonce)
            tag = self._mac(ciphertext, nonce)

        logger.debug(
            "Encrypted %d bytes (include_nonce=%s)", len(plaintext), include_nonce
        )

        if include_nonce:
            return ciphertext + tag + nonce
        return ciphertext + tag


class AuthDecryptor(_AuthBase):
    """
    Verification and decryption of AuthEncryptor output.

    Must be built from the same key and PRF as the encryptor.
    """

    def decrypt(
        self,
        data: bytes,
        nonce: Optional[bytes] = None,
        nonce_included: bool = False,
    ) -> Optional[bytes]:
        """
        Verify then decrypt.

        Args:
            data: Output of AuthEncryptor.encrypt()
            nonce: Nonce used at encryption; ignored when nonce_included
            nonce_included: Whether data ends with the carried nonce

        Returns:
            Plaintext bytes, or None if authentication fails

        Raises:
            ValueError: If nonce_included is False and nonce is not 8 bytes
        """
        tag_size = self.tag_size
        data = bytes(data)

        if nonce_included:
            if len(data) < tag_size + NONCE_SIZE:
                logger.debug("Rejected message: authentication failed")
                return None
            nonce = data[-NONCE_SIZE:]
            body = data[:-NONCE_SIZE]
        else:
            nonce = _check_nonce(nonce)
            if len(data) < tag_size:
                logger.debug("Rejected message: authentication failed")
                return None
            body = data

        split = len(body) - tag_size
        ciphertext, tag = body[:split], body[split:]

        with self._lock:
            expected_tag = self._mac(ciphertext, nonce)

            # Verify MAC first (constant-time)
            if not constant_time_equal(tag, expected_tag):
                logger.debug("Rejected message: authentication failed")
                return None

            plaintext = self._crypt(ciphertext, nonce)

        logger.debug(
            "Decrypted %d bytes (nonce_included=%s)", len(plaintext), nonce_included
        )
        return plaintext


def generate_key() -> bytes:
    """Generate a random 56-byte master key."""
    return os.urandom(KEY_SIZE)


def generate_nonce() -> bytes:
    """Generate a random 8-byte nonce."""
    return os.urandom(NONCE_SIZE)


def quick_encrypt(key: bytes, data: bytes) -> bytes:
    """
    One-shot encrypt with a random nonce carried in the output.

    A 64-bit random nonce makes collisions likely after about 2**32
    messages under one key; rotate keys well before that.

    Args:
        key: 56-byte master key
        data: Data to encrypt

    Returns:
        ciphertext || tag || nonce

    Example:
        >>> key = generate_key()
        >>> encrypted = quick_encrypt(key, b"secret")
        >>> quick_decrypt(key, encrypted)
        b'secret'
    """
    return AuthEncryptor(key).encrypt(data, generate_nonce(), include_nonce=True)


def quick_decrypt(key: bytes, encrypted: bytes) -> Optional[bytes]:
    """
    One-shot decrypt of quick_encrypt() output.

    Args:
        key: 56-byte master key
        encrypted: Ciphertext from quick_encrypt()

    Returns:
        Plaintext bytes, or None if authentication fails
    """
    return AuthDecryptor(key).decrypt(encrypted, nonce_included=True)
