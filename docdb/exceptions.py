"""
Exception hierarchy and status classification for the document database client.

Callers tell error kinds apart with ``isinstance`` checks instead of reading
status codes. Only the generic APIStatusError asks the caller to look at
``status_code`` and ``body`` directly.

**Exception Hierarchy:**

```
DocDBError (base exception)
├── TransportError (network, DNS, TLS; never retried by the core)
│   └── APITimeoutError (the request deadline elapsed)
├── APIStatusError (any other non-success status; carries status + body)
│   ├── PreconditionFailedError (412, optimistic concurrency conflict)
│   ├── ResourceNotFoundError (404)
│   ├── ResourceNotModifiedError (304, list and query operations only)
│   └── TooManyRequestsError (429, request rate too large)
├── ResponseFormatError (body is not the expected JSON shape)
│   └── KeyNotFoundError (the named result array is missing)
└── ConfigurationError (invalid method, missing body, bad key, ...)
```

**Handling a concurrency conflict:**

```python
try:
    await doc.replace(ReplaceDocumentRequest(etag=meta.etag, document=updated))
except PreconditionFailedError:
    # someone else won; fetch again and reapply the change
    ...
```
"""

from typing import TYPE_CHECKING, Any, Optional

import httpx

if TYPE_CHECKING:
    from .metadata import ResponseMetadata


class DocDBError(Exception):
    """
    Base exception for all library errors.

    Attributes:
        message: Human-readable error description
        response: HTTP response object (if one was received)
        request: HTTP request object (if one was built)
        metadata: Parsed response headers (if a response was received)
    """

    def __init__(
        self,
        message: str = "",
        response: Optional[Any] = None,
        request: Optional[Any] = None,
        metadata: Optional["ResponseMetadata"] = None,
    ):
        self.message = message
        self.response = response
        self.request = request
        self.metadata = metadata
        super().__init__(message)


class TransportError(DocDBError):
    """
    The request never produced an HTTP response.

    Raised for connection refusals, DNS failures, TLS errors and protocol
    errors. The originating httpx exception is chained as ``__cause__``.
    """

    pass


class APITimeoutError(TransportError):
    """The per-request deadline elapsed before a response arrived."""

    pass


class APIStatusError(DocDBError):
    """
    The server answered with a status the operation does not accept.

    This is the generic case; well-known statuses have their own subclasses.
    ``status_code`` is set per instance for the generic case and per class
    for the subclasses.

    Attributes:
        status_code: HTTP status code of the response
        body: Response body decoded as text (may be empty)
    """

    status_code: int = 0

    def __init__(
        self,
        message: str = "",
        response: Optional[Any] = None,
        request: Optional[Any] = None,
        metadata: Optional["ResponseMetadata"] = None,
        status_code: Optional[int] = None,
        body: str = "",
    ):
        super().__init__(message, response=response, request=request, metadata=metadata)
        if status_code is not None:
            self.status_code = status_code
        self.body = body


class PreconditionFailedError(APIStatusError):
    """
    The If-Match precondition did not hold (HTTP 412).

    Another writer changed the resource since its ETag was read. The core
    does not retry; re-read the resource and apply the change again.
    """

    status_code = 412


class ResourceNotFoundError(APIStatusError):
    """The addressed resource does not exist (HTTP 404)."""

    status_code = 404


class ResourceNotModifiedError(APIStatusError):
    """
    The feed has not changed since the supplied ETag (HTTP 304).

    Only list and query operations raise this; it lets conditional reads
    detect "no change" without treating the response as a page.
    """

    status_code = 304


class TooManyRequestsError(APIStatusError):
    """
    The request rate is too large (HTTP 429).

    Attributes:
        retry_after: Server-suggested wait in seconds (if provided)
    """

    status_code = 429

    def __init__(self, *args: Any, retry_after: Optional[float] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.retry_after = retry_after


class ResponseFormatError(DocDBError):
    """The response body could not be decoded into the expected JSON shape."""

    pass


class KeyNotFoundError(ResponseFormatError):
    """The response object lacks the array key the caller asked for."""

    def __init__(self, key: str, **kwargs: Any):
        super().__init__(f"key '{key}' was not found in the response object", **kwargs)
        self.key = key


class ConfigurationError(DocDBError):
    """The request or client was configured incorrectly; nothing was sent."""

    pass


_STATUS_ERRORS: dict[int, tuple[type[APIStatusError], str]] = {
    412: (PreconditionFailedError, "request precondition failed"),
    404: (ResourceNotFoundError, "resource not found"),
    429: (TooManyRequestsError, "request rate is too large"),
}


def _request_of(response: httpx.Response) -> Optional[httpx.Request]:
    try:
        return response.request
    except RuntimeError:
        return None


def classify_response(
    response: httpx.Response,
    *,
    not_modified: bool = False,
    metadata: Optional["ResponseMetadata"] = None,
) -> APIStatusError:
    """
    Map an unaccepted response to the error taxonomy.

    Args:
        response: The response whose status the operation did not accept
        not_modified: Whether 304 maps to ResourceNotModifiedError. Only the
            list/query path sets this; elsewhere 304 is a generic status error.
        metadata: Parsed response headers to attach to the error

    Returns:
        The exception to raise
    """
    status_code = response.status_code
    kwargs: dict[str, Any] = {
        "response": response,
        "request": _request_of(response),
        "metadata": metadata,
        "body": response.text if response.content else "",
    }

    if status_code == 304 and not_modified:
        return ResourceNotModifiedError("resource not modified", **kwargs)

    if status_code in _STATUS_ERRORS:
        error_class, message = _STATUS_ERRORS[status_code]
        if error_class is TooManyRequestsError:
            retry_after = metadata.retry_after if metadata else None
            kwargs["retry_after"] = retry_after.total_seconds() if retry_after else None
        return error_class(message, **kwargs)

    return APIStatusError(f"HTTP error: {status_code}", status_code=status_code, **kwargs)
