"""FastAPI middleware for error handling, logging, authorization and throttling."""

import time
import uuid
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Callable

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from docdb.auth import verify_authorization
from docdb.headers import (
    HEADER_ACTIVITY_ID,
    HEADER_AUTHORIZATION,
    HEADER_DATE,
    HEADER_MS_DATE,
    HEADER_REQUEST_CHARGE,
    HEADER_RETRY_AFTER_MS,
    ResourceType,
)

from .exceptions import EmulatorError, Forbidden, Unauthorized, error_response
from .logging_config import bind_request_context
from .state import ThrottleManager

logger = structlog.get_logger("emulator.middleware")

EXEMPT_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})
CONTROL_PREFIX = "/_emulator"


def is_exempt(path: str) -> bool:
    """Paths that are neither authorized nor throttled."""
    return path in EXEMPT_PATHS or path == CONTROL_PREFIX or path.startswith(CONTROL_PREFIX + "/")


def parse_resource_path(path: str) -> tuple[str, str]:
    """
    Derive the resource type and resource link a request was signed with.

    A path with an odd number of segments addresses a feed: the last segment
    is the resource type and the rest is the link of the owning resource.
    An even number addresses a single resource whose type is the next to
    last segment. Offers are linked by their lower-cased id alone.

    >>> parse_resource_path("/dbs/db1/colls/col1/docs")
    ('docs', 'dbs/db1/colls/col1')
    >>> parse_resource_path("/offers/AbCd")
    ('offers', 'abcd')
    """
    segments = path.strip("/").split("/")
    if segments[0] == ResourceType.OFFERS.value:
        return ResourceType.OFFERS.value, segments[1].lower() if len(segments) > 1 else ""
    if len(segments) % 2:
        return segments[-1], "/".join(segments[:-1])
    return segments[-2], "/".join(segments)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Structured request/response logging; echoes or assigns x-ms-activity-id."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        activity_id = request.headers.get(HEADER_ACTIVITY_ID) or str(uuid.uuid4())
        start_time = time.perf_counter()
        bind_request_context(activity_id, request.method, request.url.path)
        logger.debug("Request received", user_agent=request.headers.get("User-Agent", ""))

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "Request failed",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error_type=type(exc).__name__,
            )
            raise

        logger.debug(
            "Request completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        response.headers[HEADER_ACTIVITY_ID] = activity_id
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns unexpected exceptions into a 500 in the service's error shape."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except EmulatorError as exc:
            return error_response(exc)
        except Exception as exc:
            logger.error(
                "Unexpected server error",
                path=request.url.path,
                method=request.method,
                error_type=type(exc).__name__,
                error_message=str(exc),
            )
            return JSONResponse(
                status_code=500,
                content={"code": "InternalServerError", "message": "Internal server error"},
            )


class AuthorizationMiddleware(BaseHTTPMiddleware):
    """Verifies the master-key signature and the freshness of x-ms-date."""

    def __init__(
        self,
        app,
        key: bytes,
        max_clock_skew: timedelta,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        super().__init__(app)
        self.key = key
        self.max_clock_skew = max_clock_skew
        self.clock = clock

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        path = request.scope["path"]
        if is_exempt(path):
            return await call_next(request)

        try:
            self.check(request.method, path, request.headers)
        except EmulatorError as exc:
            logger.info("Authorization rejected", path=path, method=request.method, reason=exc.message)
            return error_response(exc)
        return await call_next(request)

    def check(self, method: str, path: str, headers) -> None:
        header = headers.get(HEADER_AUTHORIZATION)
        if not header:
            raise Unauthorized("required Authorization header is missing")

        date = headers.get(HEADER_MS_DATE) or headers.get(HEADER_DATE)
        if not date:
            raise Unauthorized("the x-ms-date header is missing")
        try:
            sent = parsedate_to_datetime(date)
        except (TypeError, ValueError):
            raise Unauthorized(f"the date '{date}' is not a valid RFC 1123 date") from None
        if sent.tzinfo is None:
            sent = sent.replace(tzinfo=timezone.utc)
        if abs(self.clock() - sent) > self.max_clock_skew:
            raise Forbidden("the request date is outside the allowed clock skew")

        resource_type, resource_link = parse_resource_path(path)
        if not verify_authorization(header, method, resource_type, resource_link, date, self.key):
            raise Unauthorized(
                "the input authorization token can't serve the request; "
                f"expected signature over '{method.lower()}', '{resource_type}', '{resource_link}'"
            )


class ThrottleMiddleware(BaseHTTPMiddleware):
    """Answers with 429 while the throttle manager has requests left to reject."""

    def __init__(self, app, manager: ThrottleManager):
        super().__init__(app)
        self.manager = manager

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if is_exempt(request.scope["path"]) or not await self.manager.should_throttle():
            return await call_next(request)

        return JSONResponse(
            status_code=429,
            content={"code": "TooManyRequests", "message": "Request rate is large"},
            headers={
                HEADER_RETRY_AFTER_MS: str(self.manager.retry_after_ms),
                HEADER_REQUEST_CHARGE: "0",
            },
        )
