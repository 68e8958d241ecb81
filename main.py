"""
ASGI entry point for the URL shortener.

`uvicorn main:app` serves an app configured from URLSHORTENER_* environment
variables; see urlshortener/config.py. The CLI (`urlshortener serve`) is the
flag-driven alternative.
"""

from urlshortener.api import create_app

app = create_app()
