"""
Base storage interface for the URL shortener.

Purpose:
    Define the small contract the registration and lookup logic needs
    (get / insert / update) so in-memory and SQL backends are interchangeable.

Contract:
    - insert() must check code uniqueness atomically with the write and raise
      DuplicateKeyError on a taken code, whether or not that record expired.
    - update() matches by record id and may change only the stored expiration
      as far as the manager is concerned.
    - Every other backend failure (including timeouts) is raised as StorageError.

Testing & Coverage:
    Abstract methods are not executed directly; they carry `# pragma: no cover`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Record:
    """One short-code mapping as stored."""

    url: str
    expire_at: datetime
    code: str
    id: Optional[int] = None


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod  # pragma: no cover
    def get(self, code: str) -> Record:
        """
        Fetch the record stored under `code`.

        Raises:
            RecordNotFoundError: If no record uses the code.
            StorageError: On backend failure.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def insert(self, record: Record) -> Record:
        """
        Persist a new record.

        Returns:
            Record: A copy of `record` with `id` populated.

        Raises:
            DuplicateKeyError: If the code is already stored.
            StorageError: On backend failure.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def update(self, record: Record) -> None:
        """
        Advance the expiration of the record with the same `id`.

        Only `expire_at` is written, and only if it is later than the stored
        value. The comparison happens inside the store, so a stale caller can
        never move an expiration backward. An earlier or equal value is a no-op.

        Raises:
            StorageError: If the id is unknown or the backend fails.
        """
        raise NotImplementedError

    def ping(self) -> None:
        """Check that the backend is reachable. Nothing to check by default."""
