"""
Token derivation for the URL shortener.
Uses Strategy Pattern so the service can be handed any token algorithm.
"""

import hashlib
from abc import ABC, abstractmethod
from typing import Tuple


SHA256_HEX_LENGTH = 64
SHA512_HEX_LENGTH = 128


def clamp(num: int, minimum: int, maximum: int) -> int:
    """Clamp num into [minimum, maximum]"""
    if num < minimum:
        return minimum
    if num > maximum:
        return maximum
    return num


def digest(text: str) -> Tuple[str, str]:
    """
    Hash the UTF-8 bytes of text with SHA-256 and SHA-512.

    Returns:
        (hex256, hex512) as lowercase hex strings of 64 and 128 characters
    """
    data = text.encode("utf-8")
    return hashlib.sha256(data).hexdigest(), hashlib.sha512(data).hexdigest()


def build_token(hex256: str, hex512: str, slice_len: int) -> str:
    """
    Join a prefix of the SHA-256 digest with a suffix of the SHA-512 digest.

    The same slice_len is clamped separately against each digest, so the
    token is clamp(n, 1, 64) + clamp(n, 1, 128) characters long.
    """
    prefix = clamp(slice_len, 1, SHA256_HEX_LENGTH)
    suffix = clamp(slice_len, 1, SHA512_HEX_LENGTH)
    return f"{hex256[:prefix]}{hex512[-suffix:]}"


class TokenStrategy(ABC):
    """Abstract base class for token generation strategies"""

    @abstractmethod
    def generate(self, url: str) -> str:
        """
        Derive the token for a URL.

        Args:
            url: The original URL, exactly as submitted

        Returns:
            Token string used as the store key
        """
        pass


class DualDigestTokenStrategy(TokenStrategy):
    """
    Truncated SHA-256 prefix + truncated SHA-512 suffix.

    Pros: Deterministic (re-submitting a URL is idempotent), no counters,
          no store round trips to derive a token
    Cons: Birthday-paradox collisions are possible for short slices;
          they are detected on write, not prevented
    """

    def __init__(self, slice_len: int = 4):
        self.slice_len = slice_len

    @property
    def token_length(self) -> int:
        return (
            clamp(self.slice_len, 1, SHA256_HEX_LENGTH)
            + clamp(self.slice_len, 1, SHA512_HEX_LENGTH)
        )

    def generate(self, url: str) -> str:
        hex256, hex512 = digest(url)
        return build_token(hex256, hex512, self.slice_len)
