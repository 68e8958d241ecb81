"""
HTTP API module for the URL shortener.

Responsibilities:
    - POST /api/v1/urls  : register a URL with an expiration, answer {id, shortUrl}
    - GET  /{code}       : 303 redirect to the original URL of a live code
    - GET  /api/v1/health: liveness check
    - Uniform JSON error bodies: {"error": "..."}

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - In-memory storage by default; PostgreSQL when configured. The store is
      pinged once at startup so an unreachable database fails fast.
    - UrlManager owns validation and collision handling; routes only translate
      its exceptions into status codes.

Error mapping:
    - body over 1 MB, empty, malformed or
      holding more than one JSON value     -> 400
    - validation failures                  -> 400 (all violations in one message)
    - unknown or expired code              -> 404
    - method not allowed                   -> 405
    - transient conflict (after one retry),
      exhausted collision space, storage   -> 500, details logged only
"""

import json
import logging
from datetime import datetime
from http import HTTPStatus
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel, ConfigDict, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .errors import (
    ExhaustedCollisionSpaceError,
    RecordNotFoundError,
    RegistrationValidationError,
    StorageError,
    TransientConflictError,
)
from .manager.url_manager import UrlManager
from .storage.base import BaseStorage
from .storage.storage_factory import get_storage

SERVER_ERROR_MESSAGE = "server cannot process your request now"
RECORD_NOT_FOUND_MESSAGE = "record not found or expired"
BODY_TOO_LARGE_MESSAGE = "body size should not exceed 1 MB"
MAX_REQUEST_BODY = 1 << 20
DEFAULT_ERROR_MESSAGES = {
    HTTPStatus.NOT_FOUND: "the requested resource could not be found",
    HTTPStatus.METHOD_NOT_ALLOWED: "this method is not allowed",
}


class URLRequest(BaseModel):
    """Request payload for registering a URL."""
    model_config = ConfigDict(extra="forbid")

    url: str
    expireAt: datetime


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        msg = err.get("msg", "invalid value")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "invalid request body"


def _bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=message)


def _decode_single_json(body: bytes) -> Any:
    """Decode exactly one JSON value; trailing data is an error."""
    try:
        text = body.decode("utf-8").strip()
    except UnicodeDecodeError:
        raise _bad_request("body is not valid UTF-8")
    if not text:
        raise _bad_request("JSON should not be empty")
    try:
        value, end = json.JSONDecoder().raw_decode(text)
    except json.JSONDecodeError as e:
        raise _bad_request(f"has syntax error at character {e.pos} in JSON")
    if text[end:].strip():
        raise _bad_request("more than 1 JSON in the request")
    return value


async def read_registration(request: Request) -> URLRequest:
    """
    Read the registration body, capped at MAX_REQUEST_BODY bytes, and parse it.

    The cap is checked against Content-Length and again while streaming, so an
    oversized body is rejected before it is decoded.

    Raises:
        HTTPException: 400 for oversized, empty, malformed or multi-value bodies.
        RequestValidationError: If the JSON does not match URLRequest.
    """
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > MAX_REQUEST_BODY:
        raise _bad_request(BODY_TOO_LARGE_MESSAGE)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > MAX_REQUEST_BODY:
            raise _bad_request(BODY_TOO_LARGE_MESSAGE)

    payload = _decode_single_json(bytes(body))
    try:
        return URLRequest.model_validate(payload)
    except ValidationError as e:
        raise RequestValidationError(e.errors())


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[BaseStorage] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Build and configure a new FastAPI app instance.

    Args:
        settings (Optional[Settings]): Configuration; read from the environment when omitted.
        storage (Optional[BaseStorage]): Storage backend; chosen from settings when omitted.
        clock (Optional[Callable[[], datetime]]): Time source for validation and expiry.

    Returns:
        FastAPI: An application with its own storage and manager instances.

    Raises:
        StorageError: If the storage backend cannot be reached at startup.
    """
    settings = settings or Settings()
    log = logging.getLogger("urlshortener")
    if not logging.getLogger().handlers:
        logging.basicConfig(
            level=settings.LOG_LEVEL,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

    app = FastAPI(
        title="URL Shortener",
        description="Deterministic URL shortener with expiring links",
        docs_url="/docs",
    )

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    if storage is None:
        storage = get_storage(settings=settings)
    manager = UrlManager(
        storage=storage,
        code_length=settings.CODE_LENGTH,
        max_reshorten_length=settings.MAX_RESHORTEN_LENGTH,
        clock=clock,
    )
    app.state.settings = settings
    app.state.storage = storage
    app.state.manager = manager

    storage.ping()

    log.info(
        "Storage backend: %s, code length %d (re-shorten up to %d)",
        type(storage).__name__, settings.CODE_LENGTH, settings.MAX_RESHORTEN_LENGTH,
    )

    # ----------------------------------------------------------------
    # Error rendering
    # ----------------------------------------------------------------
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        status = HTTPStatus(exc.status_code)
        detail = exc.detail
        if not detail or detail == status.phrase:
            detail = DEFAULT_ERROR_MESSAGES.get(status, status.phrase.lower())
        return JSONResponse({"error": detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse({"error": _validation_message(exc)}, status_code=HTTPStatus.BAD_REQUEST)

    def _register(url: str, expire_at: datetime) -> str:
        try:
            return manager.register(url, expire_at)
        except TransientConflictError:
            log.warning("Transient conflict while registering %s; retrying once", url)
            return manager.register(url, expire_at)

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/api/v1/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/v1/urls")
    def register_url(req: URLRequest = Depends(read_registration)) -> Dict[str, str]:
        """
        Register a URL and return its short code and short URL.

        Raises:
            HTTPException: 400 on invalid input, 500 when the code cannot be stored.
        """
        try:
            code = _register(req.url, req.expireAt)
        except RegistrationValidationError as e:
            raise HTTPException(status_code=HTTPStatus.BAD_REQUEST, detail=str(e))
        except (TransientConflictError, ExhaustedCollisionSpaceError, StorageError):
            log.exception("Registration of %s failed", req.url)
            raise HTTPException(status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=SERVER_ERROR_MESSAGE)
        return {"id": code, "shortUrl": settings.short_url(code)}

    @app.get("/{code}", name="redirect_url")
    def redirect_url(code: str) -> RedirectResponse:
        """
        Redirect a live short code to its original URL.

        Raises:
            HTTPException: 404 if the code is unknown or expired, 500 on storage failure.
        """
        try:
            url = manager.resolve(code)
        except RecordNotFoundError:
            raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=RECORD_NOT_FOUND_MESSAGE)
        except StorageError:
            log.exception("Lookup of %r failed", code)
            raise HTTPException(status_code=HTTPStatus.INTERNAL_SERVER_ERROR, detail=SERVER_ERROR_MESSAGE)
        return RedirectResponse(url=url, status_code=HTTPStatus.SEE_OTHER)

    return app
