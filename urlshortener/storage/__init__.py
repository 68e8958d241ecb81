"""Storage backends: in-memory (default) and PostgreSQL."""

from .base import BaseStorage, Record
from .storage import Storage

__all__ = ["BaseStorage", "Record", "Storage"]
