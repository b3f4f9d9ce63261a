"""
Logical request descriptors and the builder that turns them into signed
``httpx.Request`` objects.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import Callable, Optional, Union
from urllib.parse import quote

import httpx

from .auth import Authorizer
from .exceptions import ConfigurationError
from .headers import DEFAULT_USER_AGENT, HEADER_USER_AGENT, ResourceType
from .options import RequestOptions

BodySource = Union[bytes, bytearray, str, Iterable[bytes], None]
TimeoutTypes = Union[float, httpx.Timeout, None]


def resource_link(*segments: str) -> str:
    """Join raw identity segments, e.g. ``resource_link("dbs", db, "colls", coll)``."""
    return "/".join(segments)


def resource_path(*segments: str) -> str:
    """Join segments into a URL path, percent-escaping each segment."""
    return "/" + "/".join(quote(segment, safe="") for segment in segments)


@dataclass
class ClientRequest:
    """
    A single logical API call.

    Attributes:
        method: HTTP verb; empty means the operation's default
        path: URL path, already percent-escaped, relative to the endpoint
        resource_type: Resource type used for signing
        resource_link: Case-sensitive resource identity used for signing
        options: Header mutations applied before signing
        body: Request body; a single-use iterable is buffered once
        get_body: Re-opens the body; used when ``body`` is not set
    """

    method: str = ""
    path: str = ""
    resource_type: ResourceType = ResourceType.DOCUMENTS
    resource_link: str = ""
    options: Optional[RequestOptions] = None
    body: BodySource = None
    get_body: Optional[Callable[[], bytes]] = field(default=None, repr=False)

    def read_body(self) -> Optional[bytes]:
        """
        Return the complete body without consuming it.

        Only valid on a request returned by ``ensure_replayable``, or one
        whose body is already bytes.
        """
        if isinstance(self.body, (bytes, bytearray)):
            return bytes(self.body)
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        if self.body is None and self.get_body is not None:
            return self.get_body()
        if self.body is None:
            return None
        raise ConfigurationError("request body is a stream; call ensure_replayable() first")

    def ensure_replayable(self) -> "ClientRequest":
        """
        Return a copy whose body can be read any number of times.

        A streaming body is drained exactly once into bytes and ``get_body``
        is derived from the buffered value.
        """
        if self.body is None and self.get_body is None:
            return self
        if self.body is None:
            data = self.get_body()  # type: ignore[misc]
        elif isinstance(self.body, (bytes, bytearray)):
            data = bytes(self.body)
        elif isinstance(self.body, str):
            data = self.body.encode("utf-8")
        else:
            data = b"".join(_iter_chunks(self.body))
        return replace(self, body=data, get_body=lambda: data)

    def with_method(self, method: str) -> "ClientRequest":
        return replace(self, method=method.upper())


def _iter_chunks(body: Iterable[bytes]) -> Iterator[bytes]:
    read = getattr(body, "read", None)
    if callable(read):
        data = read()
        yield data.encode("utf-8") if isinstance(data, str) else data
        return
    for chunk in body:
        yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk


def timeout_extension(timeout: TimeoutTypes) -> dict:
    if timeout is None:
        return {}
    if not isinstance(timeout, httpx.Timeout):
        timeout = httpx.Timeout(timeout)
    return {"timeout": timeout.as_dict()}


class RequestBuilder:
    """
    Assembles signed transport requests.

    The build steps run in a fixed order: make the body replayable, join
    endpoint and path, set the user agent, apply the options and finally
    authorize. Authorization always runs last so the signature covers the
    final method and the date header it sets.
    """

    def __init__(
        self,
        endpoint: str,
        authorizer: Authorizer,
        user_agent: str = "",
        default_timeout: TimeoutTypes = None,
    ):
        self.endpoint = endpoint
        self.authorizer = authorizer
        self.user_agent = user_agent
        self.default_timeout = default_timeout

    def url_for(self, path: str) -> str:
        return f"{self.endpoint.rstrip('/')}/{path.lstrip('/')}"

    def build(self, request: ClientRequest, timeout: TimeoutTypes = None) -> httpx.Request:
        """
        Build an authorized ``httpx.Request``.

        Args:
            request: The logical request; its body must be replayable
            timeout: Per-call deadline; falls back to the builder default

        Returns:
            The request, ready for a Requester
        """
        if not request.method:
            raise ConfigurationError("request method is required")

        http_request = httpx.Request(
            request.method,
            self.url_for(request.path),
            content=request.read_body(),
            extensions=timeout_extension(
                timeout if timeout is not None else self.default_timeout
            ),
        )
        http_request.headers[HEADER_USER_AGENT] = self.user_agent or DEFAULT_USER_AGENT
        if request.options is not None:
            request.options.apply_options(http_request)
        return self.authorizer.authorize(
            http_request, request.resource_type, request.resource_link
        )
