"""
Command line interface for the URL shortener.

Usage:
  urlshortener serve --addr localhost:8080 --storage postgres --db postgresql://u:p@host/db
  urlshortener init-db --db postgresql://u:p@host/db

Flags override URLSHORTENER_* environment variables; out-of-range code lengths
are adjusted back to defaults by Settings.validate().
"""

import argparse
import logging
from typing import List, Optional

from .config import Settings

log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="urlshortener", description="URL shortener service")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the HTTP server")
    serve.add_argument("--addr", help="server address (hostname:port)")
    serve.add_argument("--storage", choices=["memory", "postgres"], help="storage backend")
    serve.add_argument("--db", dest="dsn", help="database DSN")
    serve.add_argument("--db-query-timeout", type=float, help="maximum query time (seconds)")
    serve.add_argument("--len-short-url", type=int, help="length of short codes (5..16)")
    serve.add_argument(
        "--max-len-reshort-url", type=int,
        help="maximum code length tried on collisions (greater than --len-short-url, at most 43)",
    )
    serve.add_argument("--log-level", help="logging level (DEBUG, INFO, ...)")

    init_db = sub.add_parser("init-db", help="create the urls table")
    init_db.add_argument("--db", dest="dsn", help="database DSN")
    init_db.add_argument("--db-query-timeout", type=float, help="maximum query time (seconds)")
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    """Apply command line overrides on top of environment settings."""
    settings = Settings()
    overrides = {
        "ADDR": getattr(args, "addr", None),
        "STORAGE_BACKEND": getattr(args, "storage", None),
        "DB_DSN": getattr(args, "dsn", None),
        "DB_QUERY_TIMEOUT": getattr(args, "db_query_timeout", None),
        "CODE_LENGTH": getattr(args, "len_short_url", None),
        "MAX_RESHORTEN_LENGTH": getattr(args, "max_len_reshort_url", None),
        "LOG_LEVEL": getattr(args, "log_level", None),
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(settings, name, value.upper() if name == "LOG_LEVEL" else value)
    return settings.validate()


def serve(settings: Settings) -> None:
    import uvicorn

    from .api import create_app

    host, port = settings.host_port()
    log.info("Start server at %s", settings.ADDR)
    uvicorn.run(create_app(settings), host=host, port=port, log_level=settings.LOG_LEVEL.lower())


def init_db(settings: Settings) -> None:
    from .storage.db_storage import DBStorage

    if not settings.DB_DSN:
        raise SystemExit("a database DSN is required (--db or URLSHORTENER_DB_DSN)")
    DBStorage(dsn=settings.DB_DSN, query_timeout=settings.DB_QUERY_TIMEOUT).ensure_schema()


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    if args.command == "serve":
        serve(settings)
    elif args.command == "init-db":
        init_db(settings)


if __name__ == "__main__":
    main()
