"""
Requesters: the pluggable transport layer.

A Requester sends one ``httpx.Request`` and returns the fully read
``httpx.Response``. Wrappers add behavior around another requester:

```
RetryAfterRequester      retries throttled responses (tenacity)
└── LoggingRequester     optional debug dump of each exchange
    └── HTTPXRequester   pooled httpx.AsyncClient, maps httpx errors
```

The default client stack is ``RetryAfterRequester(HTTPXRequester(config))``.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from .config import ClientConfig, RetryConfig
from .exceptions import APITimeoutError, DocDBError, TransportError
from .headers import HEADER_AUTHORIZATION, HEADER_RETRY_AFTER_MS

REDACTED = "<redacted>"


class Requester(Protocol):
    """Sends a request and returns the response with its body read."""

    async def send(self, request: httpx.Request) -> httpx.Response:
        ...


class HTTPXRequester:
    """
    Requester backed by a long-lived ``httpx.AsyncClient``.

    The client is created lazily on first use unless one is supplied. A
    supplied client is not closed by ``aclose``; its owner closes it.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self._client = client
        self._owns_client = client is None
        self._closed = False

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            if self._closed:
                raise DocDBError("requester is closed")
            config = self.config
            self._client = httpx.AsyncClient(
                timeout=config.timeout.to_httpx_timeout() if config else None,
                follow_redirects=config.follow_redirects if config else True,
                verify=config.verify_ssl if config else True,
            )
        return self._client

    def _map_httpx_exception(
        self, exc: httpx.RequestError, request: httpx.Request
    ) -> TransportError:
        """
        Map httpx exceptions to our exception hierarchy.

        Args:
            exc: The original httpx exception
            request: The request that failed

        Returns:
            Mapped exception from our hierarchy
        """
        if isinstance(exc, httpx.TimeoutException):
            return APITimeoutError(f"Request timed out: {exc}", request=request)
        return TransportError(f"Network error: {exc}", request=request)

    async def send(self, request: httpx.Request) -> httpx.Response:
        client = self._ensure_client()
        try:
            return await client.send(request)
        except httpx.RequestError as e:
            raise self._map_httpx_exception(e, request) from e

    async def aclose(self) -> None:
        """Close the underlying client if this requester created it."""
        if self._client is not None and self._owns_client and not self._closed:
            await self._client.aclose()
        self._closed = True


def retry_after_seconds(response: httpx.Response) -> Optional[float]:
    """
    Read the server's wait hint.

    ``x-ms-retry-after-ms`` wins over the standard ``Retry-After`` (seconds).
    Returns None when neither header holds a number.
    """
    millis = response.headers.get(HEADER_RETRY_AFTER_MS)
    if millis:
        try:
            return max(float(millis), 0.0) / 1000.0
        except ValueError:
            pass
    seconds = response.headers.get("Retry-After")
    if seconds:
        try:
            return max(float(seconds), 0.0)
        except ValueError:
            return None
    return None


class RetryAfterRequester:
    """
    Re-sends throttled requests after the server-suggested wait.

    Only responses, never exceptions, are retried. Once ``max_attempts``
    sends have been throttled the last response is returned unchanged so the
    caller's status handling reports it.
    """

    def __init__(
        self,
        requester: Requester,
        config: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.requester = requester
        self.config = config or RetryConfig()
        self.logger = logger or logging.getLogger(f"{__name__}.RetryAfterRequester")
        self.sleep = sleep
        self._backoff = wait_exponential(
            multiplier=self.config.multiplier,
            min=self.config.min_wait_seconds,
            max=self.config.max_wait_seconds,
        )

    def _should_retry(self, response: httpx.Response) -> bool:
        return response.status_code in self.config.status_codes

    def _wait(self, retry_state: RetryCallState) -> float:
        response = retry_state.outcome.result() if retry_state.outcome else None
        hint = retry_after_seconds(response) if response is not None else None
        if hint is None:
            return float(self._backoff(retry_state))
        return min(hint, self.config.max_wait_seconds)

    def _log_retry(self, retry_state: RetryCallState, request: httpx.Request) -> None:
        response = retry_state.outcome.result() if retry_state.outcome else None
        next_wait = retry_state.next_action.sleep if retry_state.next_action else 0
        status = response.status_code if response is not None else "?"
        self.logger.debug(
            f"Request [{request.method} {request.url}] throttled with status {status}. "
            f"Retrying in {next_wait:.3f} seconds "
            f"(Attempt {retry_state.attempt_number} of {self.config.max_attempts})"
        )

    async def send(self, request: httpx.Request) -> httpx.Response:
        retrying = AsyncRetrying(
            retry=retry_if_result(self._should_retry),
            stop=stop_after_attempt(self.config.max_attempts),
            wait=self._wait,
            before_sleep=lambda state: self._log_retry(state, request),
            retry_error_callback=lambda state: state.outcome.result(),
            sleep=self.sleep,
        )
        return await retrying(self.requester.send, request)

    async def aclose(self) -> None:
        await close_requester(self.requester)


class LoggingRequester:
    """
    Logs each request and response at DEBUG level.

    The ``Authorization`` header is always redacted. Bodies are logged only
    when ``log_bodies`` is set; the body is read from the buffered request
    content and never consumed.
    """

    def __init__(
        self,
        requester: Requester,
        logger: Optional[logging.Logger] = None,
        log_bodies: bool = False,
    ):
        self.requester = requester
        self.logger = logger or logging.getLogger(f"{__name__}.LoggingRequester")
        self.log_bodies = log_bodies

    @staticmethod
    def redacted_headers(headers: httpx.Headers) -> dict[str, str]:
        return {
            name: REDACTED if name.lower() == HEADER_AUTHORIZATION.lower() else value
            for name, value in headers.items()
        }

    async def send(self, request: httpx.Request) -> httpx.Response:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                f"Request {request.method} {request.url} "
                f"headers={self.redacted_headers(request.headers)}"
            )
            if self.log_bodies and request.content:
                self.logger.debug(
                    f"Request body: {request.content.decode('utf-8', errors='replace')}"
                )

        response = await self.requester.send(request)

        self.logger.debug(
            f"Response {response.status_code} for {request.method} {request.url}"
        )
        return response

    async def aclose(self) -> None:
        await close_requester(self.requester)


async def close_requester(requester: Any) -> None:
    """Close a requester if it supports ``aclose``."""
    aclose = getattr(requester, "aclose", None)
    if aclose is not None:
        await aclose()
