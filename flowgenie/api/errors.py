"""Exception handlers: every error leaves as ``{"success": false, "error": ...}``."""

import logging
import traceback
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from flowgenie.config import Settings
from flowgenie.errors import ConfigError, FlowGenieError

logger = logging.getLogger(__name__)


def _envelope(status_code: int, error: str, message: str | None = None, **extra) -> JSONResponse:
    body = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    body.update(extra)
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI, settings: Settings):
    @app.exception_handler(ConfigError)
    async def _config_error(request: Request, exc: ConfigError):
        logger.error(f"Configuration error on {request.method} {request.url.path}: {exc.message}")
        message = None if settings.is_production else exc.message
        return _envelope(exc.status_code, "Server configuration error", message)

    @app.exception_handler(FlowGenieError)
    async def _domain_error(request: Request, exc: FlowGenieError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _envelope(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        return _envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        fields = []
        for err in exc.errors():
            loc = ".".join(str(p) for p in err["loc"] if p != "body")
            fields.append(f"{loc}: {err['msg']}" if loc else err["msg"])
        return _envelope(400, "Validation failed", "; ".join(fields))

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        if settings.is_production:
            return _envelope(500, "Internal server error")
        return _envelope(
            500,
            str(exc) or exc.__class__.__name__,
            stack="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
