"""
UrlManager module for the URL shortener.

Responsibilities:
    - Validate registrations (all violations reported together)
    - Derive the base short code and insert it
    - Resolve duplicate-key rejections: re-shorten, extend expiration, or accept
    - Resolve short codes to live original URLs

Design notes:
    - The store's atomic insert is the only concurrency control; DuplicateKeyError
      is the signal that a code is taken. No application-level locks.
    - Re-shortening walks candidate_codes(url, L0 + 1, Lmax). Every candidate is
      claimed the same way as the base code, so a URL that was re-shortened
      before gets its existing longer code back.
    - The original URL of a code never changes; only its expiration moves forward,
      and the store itself refuses to move it backward.
    - Equal expirations never trigger a write.
    - A failed expiration update is surfaced as StorageError, never swallowed.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional

from ..errors import (
    DuplicateKeyError,
    ExhaustedCollisionSpaceError,
    InvalidLengthError,
    RecordNotFoundError,
    TransientConflictError,
)
from ..storage.base import BaseStorage, Record
from .strategies import MAX_CODE_LENGTH, SHA256Strategy, candidate_codes
from .validators import as_aware, utcnow, validate_registration

log = logging.getLogger(__name__)

CodeStrategy = Callable[[str, int], str]  # (url, length) -> code
Clock = Callable[[], datetime]


class UrlManager:
    """
    Coordinates registration and lookup of short codes.

    Args:
        storage (BaseStorage): Backend storage instance.
        code_length (int): Base code length (L0).
        max_reshorten_length (int): Longest code tried on collisions (Lmax > L0).
        code_strategy (Optional[CodeStrategy]): (url, length) -> code; SHA256Strategy by default.
        clock (Optional[Clock]): Returns the current aware datetime; UTC now by default.

    Raises:
        InvalidLengthError: If the lengths are outside 1..43 or Lmax <= L0.
    """

    def __init__(
        self,
        storage: BaseStorage,
        code_length: int = 8,
        max_reshorten_length: int = 12,
        code_strategy: Optional[CodeStrategy] = None,
        clock: Optional[Clock] = None,
    ):
        for name, value in (("code_length", code_length), ("max_reshorten_length", max_reshorten_length)):
            if not 1 <= value <= MAX_CODE_LENGTH:
                raise InvalidLengthError(f"{name}={value} out of the range [1, {MAX_CODE_LENGTH}]")
        if max_reshorten_length <= code_length:
            raise InvalidLengthError(
                f"max_reshorten_length ({max_reshorten_length}) must be greater than code_length ({code_length})"
            )
        self.storage = storage
        self.code_length = code_length
        self.max_reshorten_length = max_reshorten_length
        self.code_strategy = code_strategy or SHA256Strategy()
        self.clock = clock or utcnow

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def register(self, url: str, expire_at: datetime) -> str:
        """
        Register `url` until `expire_at` and return its short code.

        Rules:
            - Insert the base-length code.
            - Code taken by a different URL: try longer codes up to max_reshorten_length.
            - Any tried code already held by the same URL: move the expiration
              forward if the new one is later, otherwise leave the record alone.

        Raises:
            RegistrationValidationError: On invalid URL and/or expiration.
            TransientConflictError: If the colliding record disappeared before it was read.
            ExhaustedCollisionSpaceError: If every candidate code is taken.
            StorageError: On any other store failure, including a failed update.
        """
        validate_registration(url, expire_at, now=self.clock())
        expire_at = as_aware(expire_at)

        code = self.code_strategy(url, self.code_length)
        claimed = self._claim(code, url, expire_at)
        if claimed is not None:
            return claimed

        for candidate in candidate_codes(url, self.code_length + 1, self.max_reshorten_length, self.code_strategy):
            claimed = self._claim(candidate, url, expire_at)
            if claimed is not None:
                log.info("Re-shortened %s -> %s", url, candidate)
                return claimed
        raise ExhaustedCollisionSpaceError(
            f"no free code for {url!r} up to length {self.max_reshorten_length}"
        )

    def _claim(self, code: str, url: str, expire_at: datetime) -> Optional[str]:
        """
        Insert `code` for `url`, or accept it if it already maps to `url`.

        Returns None when the code belongs to a different URL.
        """
        try:
            self.storage.insert(Record(url=url, expire_at=expire_at, code=code))
            log.debug("Registered %s -> %s", code, url)
            return code
        except DuplicateKeyError:
            pass

        try:
            existing = self.storage.get(code)
        except RecordNotFoundError as e:
            raise TransientConflictError(f"record {code!r} vanished after duplicate-key rejection") from e

        if existing.url != url:
            log.warning("Short code collision on %r (%s vs %s)", code, existing.url, url)
            return None

        if expire_at > as_aware(existing.expire_at):
            self.storage.update(replace(existing, expire_at=expire_at))
            log.info("Extended expiration of %s to %s", code, expire_at.isoformat())
        return code

    def resolve(self, code: str) -> str:
        """
        Return the original URL of a live code.

        Raises:
            RecordNotFoundError: If the code is unknown or its record has expired.
            StorageError: On store failure.
        """
        record = self.storage.get(code)
        if as_aware(record.expire_at) <= as_aware(self.clock()):
            raise RecordNotFoundError(code)
        return record.url
