"""Request tracing and CORS for the HR API."""

import logging
import re
import time
import uuid

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from hr_backend.core.config import Settings

logger = logging.getLogger("hr_platform.access")

REQUEST_ID_HEADER = "X-Request-Id"
TRACE_HEADERS = [REQUEST_ID_HEADER, "X-Response-Time-Ms", "Content-Disposition"]

# Caller-supplied ids are echoed back only when they look like an opaque token.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

_QUIET_PATHS = {"/api/health"}


def resolve_request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER)
    if incoming and _REQUEST_ID_PATTERN.match(incoming):
        return incoming
    return uuid.uuid4().hex


class RequestTraceMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and write one access-log line per response.

    Server errors are logged at WARNING, health checks at DEBUG, everything
    else at INFO.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = resolve_request_id(request)
        request.state.request_id = request_id
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.2f}"

        if response.status_code >= 500:
            level = logging.WARNING
        elif request.url.path in _QUIET_PATHS:
            level = logging.DEBUG
        else:
            level = logging.INFO
        logger.log(
            level,
            "[%s] %s %s -> %s (%.2fms)",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Install CORS and request tracing.

    Browsers reject credentialed responses for a wildcard origin, so
    credentials are only allowed when explicit origins are configured.
    """
    wildcard = "*" in settings.CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=not wildcard,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", REQUEST_ID_HEADER],
        expose_headers=TRACE_HEADERS,
    )
    app.add_middleware(RequestTraceMiddleware)
