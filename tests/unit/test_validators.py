"""
Unit tests for registration validation.

Covers:
    - URL prefix check (http/https only, prefix only)
    - expiration strictly after now, naive datetimes as UTC
    - aggregation of every violation
"""

from datetime import datetime, timedelta, timezone

import pytest

from urlshortener.errors import InvalidExpirationError, InvalidURLError, RegistrationValidationError
from urlshortener.manager.validators import (
    as_aware,
    validate_expiration,
    validate_registration,
    validate_url,
)

NOW = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "url",
    ["http://google.com", "https://github.com", "https://", "http://not a real host"],
)
def test_validate_url_accepts_http_prefixes(url):
    validate_url(url)


@pytest.mark.parametrize(
    "url",
    ["", "google.com", "ftp://example.com", "HTTP://example.com", " https://example.com", "javascript:alert(1)", None, 42],
)
def test_validate_url_rejects(url):
    with pytest.raises(InvalidURLError, match="invalid url"):
        validate_url(url)


def test_validate_expiration_future_ok():
    validate_expiration(NOW + timedelta(seconds=1), now=NOW)


@pytest.mark.parametrize("delta", [timedelta(0), timedelta(seconds=-1), timedelta(days=-365)])
def test_validate_expiration_not_after_now_fails(delta):
    with pytest.raises(InvalidExpirationError, match="expire time should be after now"):
        validate_expiration(NOW + delta, now=NOW)


def test_validate_expiration_naive_is_utc():
    validate_expiration(datetime(2030, 1, 1, 12, 0, 1), now=NOW)
    with pytest.raises(InvalidExpirationError):
        validate_expiration(datetime(2030, 1, 1, 11, 59, 59), now=NOW)


def test_validate_expiration_other_timezone():
    plus_two = timezone(timedelta(hours=2))
    # 13:00+02:00 is 11:00Z, before NOW
    with pytest.raises(InvalidExpirationError):
        validate_expiration(datetime(2030, 1, 1, 13, 0, tzinfo=plus_two), now=NOW)


def test_validate_expiration_rejects_non_datetime():
    with pytest.raises(InvalidExpirationError):
        validate_expiration("2030-01-02T00:00:00Z", now=NOW)


def test_validate_expiration_defaults_to_current_time():
    validate_expiration(datetime.now(timezone.utc) + timedelta(hours=1))
    with pytest.raises(InvalidExpirationError):
        validate_expiration(datetime(2000, 1, 1, tzinfo=timezone.utc))


def test_validate_registration_ok():
    validate_registration("https://a.example", NOW + timedelta(hours=1), now=NOW)


def test_validate_registration_reports_all_errors():
    with pytest.raises(RegistrationValidationError) as excinfo:
        validate_registration("a.example", NOW - timedelta(hours=1), now=NOW)
    errors = excinfo.value.errors
    assert [type(e) for e in errors] == [InvalidURLError, InvalidExpirationError]
    assert str(excinfo.value) == "invalid url; expire time should be after now"


def test_validate_registration_single_error():
    with pytest.raises(RegistrationValidationError) as excinfo:
        validate_registration("https://a.example", NOW, now=NOW)
    assert len(excinfo.value.errors) == 1
    assert isinstance(excinfo.value, ValueError)


def test_as_aware_keeps_aware_values():
    assert as_aware(NOW) is NOW
    assert as_aware(datetime(2030, 1, 1)).tzinfo is timezone.utc
