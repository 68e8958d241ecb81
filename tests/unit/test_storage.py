"""
Unit tests for the in-memory Storage.

Covers:
    - insert assigns ids and returns a copy
    - duplicate codes rejected, even for expired records
    - get found / not found, copies returned
    - update by id only moves expire_at forward; unknown id rejected
"""

from datetime import datetime, timedelta, timezone

import pytest

from urlshortener.errors import DuplicateKeyError, RecordNotFoundError, StorageError
from urlshortener.storage.base import Record
from urlshortener.storage.storage import Storage

FUTURE = datetime(2030, 1, 1, tzinfo=timezone.utc)
PAST = datetime(2000, 1, 1, tzinfo=timezone.utc)


def make(code="abc12345", url="https://example.com", expire_at=FUTURE):
    return Record(url=url, expire_at=expire_at, code=code)


def test_insert_and_get(storage):
    saved = storage.insert(make())
    assert saved.id == 1
    fetched = storage.get("abc12345")
    assert fetched == saved


def test_insert_does_not_mutate_argument(storage):
    record = make()
    storage.insert(record)
    assert record.id is None


def test_ids_increase(storage):
    first = storage.insert(make(code="a"))
    second = storage.insert(make(code="b"))
    assert second.id > first.id


def test_insert_duplicate_code_rejected(storage):
    storage.insert(make(url="https://one.com"))
    with pytest.raises(DuplicateKeyError):
        storage.insert(make(url="https://two.com"))
    assert storage.get("abc12345").url == "https://one.com"


def test_insert_duplicate_code_rejected_even_when_expired(storage):
    storage.insert(make(expire_at=PAST))
    with pytest.raises(DuplicateKeyError):
        storage.insert(make(expire_at=FUTURE))


def test_get_not_found(storage):
    with pytest.raises(RecordNotFoundError):
        storage.get("missing")


def test_get_returns_copy(storage):
    storage.insert(make())
    fetched = storage.get("abc12345")
    fetched.expire_at = PAST
    assert storage.get("abc12345").expire_at == FUTURE


def test_update_extends_expiration(storage):
    saved = storage.insert(make())
    saved.expire_at = FUTURE + timedelta(days=1)
    storage.update(saved)
    assert storage.get("abc12345").expire_at == FUTURE + timedelta(days=1)
    assert len(storage) == 1


def test_update_unknown_id(storage):
    with pytest.raises(StorageError):
        storage.update(Record(url="https://x.com", expire_at=FUTURE, code="x", id=99))
    with pytest.raises(StorageError):
        storage.update(make())  # id None


@pytest.mark.parametrize("delta", [timedelta(0), -timedelta(days=1)])
def test_update_never_moves_expiration_backward(storage, delta):
    saved = storage.insert(make())
    saved.expire_at = FUTURE + delta
    storage.update(saved)
    assert storage.get("abc12345").expire_at == FUTURE


def test_update_only_touches_expiration(storage):
    saved = storage.insert(make())
    storage.update(Record(url="https://other.com", expire_at=FUTURE + timedelta(days=1), code="zzz", id=saved.id))
    fetched = storage.get("abc12345")
    assert (fetched.url, fetched.code) == ("https://example.com", "abc12345")
    assert fetched.expire_at == FUTURE + timedelta(days=1)
    with pytest.raises(RecordNotFoundError):
        storage.get("zzz")
