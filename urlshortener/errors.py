"""
Exception taxonomy for the URL shortener.

Responsibilities:
    - Give every failure mode of registration and lookup its own type
    - Keep store-level signals (DuplicateKeyError) separate from client-facing errors
    - Let the HTTP layer map errors to status codes without string matching

Mapping used by the API:
    - RegistrationValidationError       -> 400
    - RecordNotFoundError               -> 404
    - TransientConflictError,
      ExhaustedCollisionSpaceError,
      StorageError                      -> 500 (details logged, never echoed)
"""

from typing import List


class UrlShortenerError(Exception):
    """Root of every error raised by this package."""


class InvalidURLError(UrlShortenerError, ValueError):
    """The submitted URL does not start with http:// or https://."""

    def __init__(self, message: str = "invalid url"):
        super().__init__(message)


class InvalidExpirationError(UrlShortenerError, ValueError):
    """The requested expiration is not strictly in the future."""

    def __init__(self, message: str = "expire time should be after now"):
        super().__init__(message)


class RegistrationValidationError(UrlShortenerError, ValueError):
    """
    Aggregates every validation failure of a registration request.

    Attributes:
        errors (List[ValueError]): Individual violations, in check order.
    """

    def __init__(self, errors: List[ValueError]):
        self.errors = list(errors)
        super().__init__("; ".join(str(e) for e in self.errors))


class InvalidLengthError(UrlShortenerError, ValueError):
    """A code length outside the range the digest encoding can produce."""


class RecordNotFoundError(UrlShortenerError, LookupError):
    """No live record exists for a code (absent and expired look the same)."""

    def __init__(self, code: str = ""):
        self.code = code
        super().__init__(f"record not found: {code!r}" if code else "record not found")


class DuplicateKeyError(UrlShortenerError):
    """The store already holds a record with this short code."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"duplicate short code: {code!r}")


class TransientConflictError(UrlShortenerError):
    """The record that caused a duplicate-key rejection vanished before it could be read."""


class ExhaustedCollisionSpaceError(UrlShortenerError):
    """Every candidate code up to the maximum re-shorten length is taken."""


class StorageError(UrlShortenerError):
    """Any store failure other than a duplicate key, including timeouts."""
