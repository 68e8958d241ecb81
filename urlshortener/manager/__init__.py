"""Short-code derivation, validation and registration logic."""

from .strategies import MAX_CODE_LENGTH, SHA256Strategy, candidate_codes, derive
from .url_manager import UrlManager

__all__ = ["MAX_CODE_LENGTH", "SHA256Strategy", "UrlManager", "candidate_codes", "derive"]
