"""
Input validation for registrations.

Checks are syntactic and side-effect free. validate_registration runs every
check and reports all violations together instead of stopping at the first.
"""

from datetime import datetime, timezone
from typing import List, Optional

from ..errors import InvalidExpirationError, InvalidURLError, RegistrationValidationError

_URL_PREFIXES = ("http://", "https://")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_aware(t: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t


def validate_url(s: str) -> None:
    """
    Raises:
        InvalidURLError: Unless `s` starts with http:// or https://.
    """
    if not isinstance(s, str) or not s.startswith(_URL_PREFIXES):
        raise InvalidURLError()


def validate_expiration(t: datetime, now: Optional[datetime] = None) -> None:
    """
    Raises:
        InvalidExpirationError: Unless `t` is strictly after `now` (default: current UTC time).
    """
    if not isinstance(t, datetime):
        raise InvalidExpirationError("expire time should be a timestamp")
    now = as_aware(now) if now is not None else utcnow()
    if as_aware(t) <= now:
        raise InvalidExpirationError()


def validate_registration(url: str, expire_at: datetime, now: Optional[datetime] = None) -> None:
    """
    Validate a registration request, collecting every failure.

    Raises:
        RegistrationValidationError: With `.errors` listing each violation.
    """
    errors: List[ValueError] = []
    for check, args in ((validate_url, (url,)), (validate_expiration, (expire_at, now))):
        try:
            check(*args)
        except (InvalidURLError, InvalidExpirationError) as e:
            errors.append(e)
    if errors:
        raise RegistrationValidationError(errors)
