"""
Storage factory - switch storage backend from config
====================================================

Centralizes selection of the storage backend (in-memory vs PostgreSQL) so the
rest of the app stays ignorant of where records live.

- Reads environment at call time (via a fresh Settings) when no settings are given,
  to avoid stale values in tests.
- Imports the DB backend only if the selected backend is "postgres".
"""

import logging
from typing import Optional

from ..config import Settings
from .base import BaseStorage
from .storage import Storage

log = logging.getLogger(__name__)


def get_storage(backend: Optional[str] = None, settings: Optional[Settings] = None, **kwargs) -> BaseStorage:
    """
    Return a storage backend based on configuration.

    Parameters
    ----------
    backend : str, optional
        "memory" or "postgres". Defaults to settings.STORAGE_BACKEND.
    settings : Settings, optional
        Source of defaults; a fresh Settings() (current env) when omitted.
    kwargs : dict
        For postgres: dsn="...", query_timeout=seconds.
    """
    settings = settings or Settings()
    be = (backend or settings.STORAGE_BACKEND).strip().lower()
    log.info("Selected storage backend: %r", be)

    if be == "memory":
        return Storage()

    if be == "postgres":
        dsn = kwargs.get("dsn") or settings.DB_DSN
        if not dsn:
            raise ValueError("DB_DSN is required for postgres backend (env URLSHORTENER_DB_DSN)")
        # Local import to avoid hard dependency when not using postgres
        from .db_storage import DBStorage
        return DBStorage(dsn=dsn, query_timeout=kwargs.get("query_timeout", settings.DB_QUERY_TIMEOUT))

    raise ValueError(f"Unknown storage backend: {be!r}")
