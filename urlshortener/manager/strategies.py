"""
Short-code derivation for the URL shortener.

derive(url, length):
    SHA-256(url) -> unpadded URL-safe Base64 (43 symbols) -> truncate to `length`.

Properties:
    - Deterministic: the same (url, length) always yields the same code.
    - Prefix-monotonic: derive(url, L) is a prefix of derive(url, L + 1),
      because every length slices the same encoded digest.
    - URL-safe alphabet: A-Z a-z 0-9 - _

candidate_codes(url, start, stop[, strategy]):
    Lazy, finite sequence of derive(url, n) (or strategy(url, n)) for n = start..stop.
    Each call returns a fresh generator, so the sequence can be restarted.
"""

import base64
import hashlib
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Iterator

from ..errors import InvalidLengthError

CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"

# 256-bit digest -> ceil(256 / 6) symbols once padding is stripped
MAX_CODE_LENGTH = 43


@lru_cache(maxsize=1024)
def _encoded_digest(url: str) -> str:
    digest = hashlib.sha256(url.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def _check_length(length: int) -> int:
    if isinstance(length, bool) or not isinstance(length, int):
        raise InvalidLengthError(f"code length must be an integer, got {length!r}")
    if length < 1 or length > MAX_CODE_LENGTH:
        raise InvalidLengthError(f"code length {length} out of the range [1, {MAX_CODE_LENGTH}]")
    return length


def derive(url: str, length: int) -> str:
    """
    Derive the short code of `url` with exactly `length` symbols.

    Raises:
        InvalidLengthError: If length is not within 1..MAX_CODE_LENGTH.
    """
    return _encoded_digest(url)[:_check_length(length)]


def candidate_codes(
    url: str, start: int, stop: int, strategy: Callable[[str, int], str] = derive
) -> Iterator[str]:
    """
    Yield strategy(url, n) for n from `start` to `stop` inclusive.

    Both bounds are checked before anything is yielded.
    """
    _check_length(start)
    _check_length(stop)
    for n in range(start, stop + 1):
        yield strategy(url, n)


@dataclass(frozen=True)
class SHA256Strategy:
    """Strategy object wrapping derive(); callable as (url, length) -> code."""

    def generate(self, url: str, length: int) -> str:
        return derive(url, length)

    def __call__(self, url: str, length: int) -> str:
        return self.generate(url, length)
