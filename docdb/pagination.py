"""
Continuation-driven pagination over list and query feeds.

One run walks a single feed strictly in server order:

1. Build the request (GET lists, POST queries) and send it.
2. Anything but 200 fails the run; 304 fails with ResourceNotModifiedError.
3. Extract the array under the caller's key and hand it to the consumer.
4. Stop when the consumer declines, or when the response carried no
   continuation token. Otherwise rebuild the request with the continuation
   and session token of that response and go back to 1.

The paginator is type-agnostic: items are decoded JSON values and typed
decoding is left to the caller.
"""

import inspect
from collections.abc import AsyncIterator
from contextlib import aclosing
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Optional, Union

import httpx

from .exceptions import ConfigurationError, ResponseFormatError, classify_response
from .headers import (
    CONTENT_TYPE_QUERY_JSON,
    HEADER_CONTENT_TYPE,
    HEADER_CONTINUATION,
    HEADER_IS_QUERY,
    HEADER_SESSION_TOKEN,
)
from .metadata import ResponseMetadata, get_response_metadata
from .options import RequestOptionsFunc, chain_options
from .parsers import parse_array_from_response
from .request import ClientRequest, RequestBuilder, TimeoutTypes
from .transport import Requester

PageConsumer = Callable[
    [list[Any], ResponseMetadata], Union[bool, Awaitable[bool]]
]


@dataclass(frozen=True)
class Page:
    """One page of a feed: the raw items and the metadata of its response."""

    items: list[Any]
    metadata: ResponseMetadata


def mark_as_query(request: httpx.Request) -> None:
    request.headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_QUERY_JSON
    request.headers[HEADER_IS_QUERY] = "true"


class ContinuationOptions:
    """Carries the cursor and session of the preceding response forward."""

    def __init__(self, metadata: ResponseMetadata):
        self.continuation = metadata.continuation
        self.session_token = metadata.session_token

    def apply_options(self, request: httpx.Request) -> None:
        request.headers[HEADER_CONTINUATION] = self.continuation
        if self.session_token:
            request.headers[HEADER_SESSION_TOKEN] = self.session_token


class Paginator:
    """Runs the list/query protocol against one builder and requester."""

    def __init__(self, builder: RequestBuilder, requester: Requester):
        self.builder = builder
        self.requester = requester

    @staticmethod
    def prepare(request: ClientRequest) -> ClientRequest:
        """
        Validate the method and make the body replayable.

        An empty method means GET. POST is a query: the query markers are
        applied after the caller's own options.
        """
        method = request.method.upper() or "GET"
        if method == "GET":
            return replace(request, method=method).ensure_replayable()
        if method == "POST":
            return replace(
                request,
                method=method,
                options=chain_options(request.options, RequestOptionsFunc(mark_as_query)),
            ).ensure_replayable()
        raise ConfigurationError(
            f"Invalid request method '{request.method}'; must be either GET or POST"
        )

    async def pages(
        self,
        key: str,
        request: ClientRequest,
        timeout: TimeoutTypes = None,
    ) -> AsyncIterator[Page]:
        """
        Yield the pages of a feed in server order.

        Leaving the loop early is the early stop: no further request is made.
        """
        initial = self.prepare(request)
        current = initial
        while True:
            http_request = self.builder.build(current, timeout)
            response = await self.requester.send(http_request)
            metadata = get_response_metadata(response)
            if response.status_code != 200:
                raise classify_response(response, not_modified=True, metadata=metadata)

            try:
                items = parse_array_from_response(response.content, key)
            except ResponseFormatError as e:
                e.response = response
                e.request = http_request
                e.metadata = metadata
                raise

            yield Page(items=items, metadata=metadata)

            if not metadata.continuation:
                return
            current = replace(
                initial,
                options=chain_options(initial.options, ContinuationOptions(metadata)),
            )

    async def run(
        self,
        key: str,
        request: ClientRequest,
        fn: PageConsumer,
        timeout: TimeoutTypes = None,
    ) -> None:
        """
        Feed every page to ``fn`` until it returns False or the feed ends.

        ``fn`` may be a plain function or a coroutine function. An exception
        raised by ``fn`` aborts the run and propagates unchanged.
        """
        async with aclosing(self.pages(key, request, timeout)) as pages:
            async for page in pages:
                result = fn(page.items, page.metadata)
                if inspect.isawaitable(result):
                    result = await result
                if not result:
                    return


async def collect(pages: AsyncIterator[Page], limit: Optional[int] = None) -> list[Any]:
    """Gather the items of a page stream, stopping after ``limit`` items."""
    items: list[Any] = []
    async with aclosing(pages) as stream:  # type: ignore[type-var]
        async for page in stream:
            items.extend(page.items)
            if limit is not None and len(items) >= limit:
                return items[:limit]
    return items
