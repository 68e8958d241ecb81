"""
Storage module for the URL shortener (in-memory implementation).

Responsibilities:
    - Keep records by short code with a unique-code guarantee
    - Assign increasing ids on insert
    - Advance the expiration of a record by id

Design:
    - Satisfies the BaseStorage contract, so it doubles as the test backend.
    - A single lock makes insert's check-then-write atomic, mirroring a
      unique constraint in a SQL database.
    - Records are copied in and out so callers never share mutable state with the store.
"""

import itertools
import threading
from dataclasses import replace
from typing import Dict

from ..errors import DuplicateKeyError, RecordNotFoundError, StorageError
from .base import BaseStorage, Record


class Storage(BaseStorage):
    def __init__(self):
        """
        Initialize empty storage.

        Internal schema:
            self.records = {code: Record(...)}
            self._codes_by_id = {id: code}
        """
        self.records: Dict[str, Record] = {}
        self._codes_by_id: Dict[int, str] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def get(self, code: str) -> Record:
        with self._lock:
            record = self.records.get(code)
            if record is None:
                raise RecordNotFoundError(code)
            return replace(record)

    def insert(self, record: Record) -> Record:
        """
        Insert a record if its code is free.

        Expired records still occupy their code; callers decide what to do.
        """
        with self._lock:
            if record.code in self.records:
                raise DuplicateKeyError(record.code)
            stored = replace(record, id=next(self._ids))
            self.records[stored.code] = stored
            self._codes_by_id[stored.id] = stored.code
            return replace(stored)

    def update(self, record: Record) -> None:
        """
        Move the expiration of the record with `record.id` forward.

        Only expire_at is written, and only when it is later than the stored one,
        so concurrent extensions never move it backward.
        """
        with self._lock:
            code = self._codes_by_id.get(record.id)
            if code is None:
                raise StorageError(f"no record with id {record.id!r}")
            stored = self.records[code]
            if record.expire_at > stored.expire_at:
                self.records[code] = replace(stored, expire_at=record.expire_at)

    def __len__(self) -> int:
        return len(self.records)
