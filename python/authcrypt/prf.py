"""
authcrypt PRF - Keyed pseudorandom function capability.

Every other layer treats the PRF as an opaque, already-secure primitive:
it is the MAC over ciphertexts and the ratchet of the forward-secure
generator. Any vetted primitive can be plugged in by subclassing PRF.

Example:
    >>> from authcrypt.prf import HmacSha256PRF
    >>> prf = HmacSha256PRF()
    >>> tag = prf.evaluate(key, b"message")
    >>> len(tag) == prf.output_size
    True
"""

import hmac
import hashlib
from abc import ABC, abstractmethod


class PRF(ABC):
    """Keyed function producing a fixed-size output from any input."""

    #: Output length in bytes; doubles as the tag size.
    output_size: int = 32

    @abstractmethod
    def evaluate(self, key: bytes, message: bytes) -> bytes:
        """
        Evaluate the PRF.

        Args:
            key: Secret key
            message: Arbitrary-length input

        Returns:
            Exactly ``output_size`` bytes
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(output_size={self.output_size})"


class HmacSha256PRF(PRF):
    """HMAC-SHA256. The default primitive."""

    output_size = hashlib.sha256().digest_size

    def evaluate(self, key: bytes, message: bytes) -> bytes:
        return hmac.new(key, message, hashlib.sha256).digest()


class Blake2bPRF(PRF):
    """
    Keyed BLAKE2b with a 32-byte digest.

    BLAKE2b accepts keys of at most 64 bytes, which covers every key
    this package feeds it (MAC key and generator state).
    """

    output_size = 32

    def evaluate(self, key: bytes, message: bytes) -> bytes:
        if len(key) > hashlib.blake2b.MAX_KEY_SIZE:
            raise ValueError(
                f"BLAKE2b key must be at most {hashlib.blake2b.MAX_KEY_SIZE} bytes, "
                f"got {len(key)}"
            )
        return hashlib.blake2b(
            message, key=key, digest_size=self.output_size
        ).digest()


def constant_time_equal(a: bytes, b: bytes) -> bool:
    """Compare two byte strings without content-dependent timing."""
    return hmac.compare_digest(a, b)


DEFAULT_PRF = HmacSha256PRF()
