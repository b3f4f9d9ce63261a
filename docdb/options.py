"""
Request options: composable header mutations applied to an outgoing request.

Each option source only sets the headers it owns. Sources stack through
RequestOptionsList, which applies its members in order and skips None.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Protocol, Union, runtime_checkable

import httpx

from .auth import format_http_date
from .headers import (
    HEADER_A_IM,
    HEADER_ACTIVITY_ID,
    HEADER_CONSISTENCY_LEVEL,
    HEADER_CONTENT_TYPE,
    HEADER_CONTINUATION,
    HEADER_ENABLE_CROSS_PARTITION,
    HEADER_IF_MATCH,
    HEADER_IF_MODIFIED_SINCE,
    HEADER_IF_NONE_MATCH,
    HEADER_MAX_ITEM_COUNT,
    HEADER_PARTITION_KEY,
    HEADER_PARTITION_KEY_RANGE_ID,
    HEADER_SESSION_TOKEN,
    ConsistencyLevel,
)

CHANGE_FEED_A_IM = "Incremental feed"


@runtime_checkable
class RequestOptions(Protocol):
    """Anything that can add headers to an outgoing request."""

    def apply_options(self, request: httpx.Request) -> None:
        ...


class RequestOptionsFunc:
    """
    Adapt a plain function into RequestOptions.

    ```python
    opts = RequestOptionsFunc(lambda req: req.headers.__setitem__("x-trace", "1"))
    ```
    """

    def __init__(self, fn: Callable[[httpx.Request], None]):
        self.fn = fn

    def apply_options(self, request: httpx.Request) -> None:
        self.fn(request)


class RequestOptionsList:
    """Ordered composite of options; None members are skipped."""

    def __init__(self, options: Iterable[Optional[RequestOptions]] = ()):
        self.options: list[Optional[RequestOptions]] = list(options)

    def __len__(self) -> int:
        return len(self.options)

    def __iter__(self):
        return iter(self.options)

    def append(self, option: Optional[RequestOptions]) -> "RequestOptionsList":
        """Return a new list with ``option`` applied after the current members."""
        return RequestOptionsList([*self.options, option])

    def apply_options(self, request: httpx.Request) -> None:
        for option in self.options:
            if option is not None:
                option.apply_options(request)


def chain_options(*options: Optional[RequestOptions]) -> Optional[RequestOptions]:
    """
    Combine option sources, dropping None.

    Returns None when nothing remains and the single source itself when only
    one does, so the chain never grows wrappers it does not need.
    """
    present = [option for option in options if option is not None]
    if not present:
        return None
    if len(present) == 1:
        return present[0]
    return RequestOptionsList(present)


@dataclass
class CommonRequestOptions:
    """
    Common request headers, applied only to the verbs that accept them.

    - ``content_type`` only on PUT and POST
    - ``if_match`` only on PUT and DELETE
    - ``if_none_match`` (or, when empty, ``if_modified_since``) only on GET

    Everything else is sent on any verb when set.
    """

    activity_id: str = ""
    content_type: str = ""
    if_match: str = ""
    if_none_match: str = ""
    if_modified_since: Optional[datetime] = None
    session_token: str = ""
    consistency_level: Union[ConsistencyLevel, str, None] = None
    partition_key: str = ""
    partition_key_range_id: str = ""
    enable_cross_partition: bool = False
    change_feed: bool = False
    max_item_count: int = 0
    continuation: str = ""

    def apply_options(self, request: httpx.Request) -> None:
        headers = request.headers
        method = request.method

        if method in ("PUT", "POST") and self.content_type:
            headers[HEADER_CONTENT_TYPE] = self.content_type
        if method in ("PUT", "DELETE") and self.if_match:
            headers[HEADER_IF_MATCH] = self.if_match
        if method == "GET":
            if self.if_none_match:
                headers[HEADER_IF_NONE_MATCH] = self.if_none_match
            elif self.if_modified_since is not None:
                headers[HEADER_IF_MODIFIED_SINCE] = format_http_date(self.if_modified_since)

        if self.enable_cross_partition:
            headers[HEADER_ENABLE_CROSS_PARTITION] = "true"
        if self.activity_id:
            headers[HEADER_ACTIVITY_ID] = self.activity_id
        if self.session_token:
            headers[HEADER_SESSION_TOKEN] = self.session_token
        if self.consistency_level:
            headers[HEADER_CONSISTENCY_LEVEL] = ConsistencyLevel(self.consistency_level).value
        if self.continuation:
            headers[HEADER_CONTINUATION] = self.continuation
        if self.max_item_count:
            headers[HEADER_MAX_ITEM_COUNT] = str(self.max_item_count)
        if self.partition_key:
            headers[HEADER_PARTITION_KEY] = self.partition_key
        if self.partition_key_range_id:
            headers[HEADER_PARTITION_KEY_RANGE_ID] = self.partition_key_range_id
        if self.change_feed:
            headers[HEADER_A_IM] = CHANGE_FEED_A_IM
