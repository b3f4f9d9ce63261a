"""Response builders and request header parsing shared by the endpoints."""

import json
from typing import Any, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from docdb.headers import (
    CONTENT_TYPE_QUERY_JSON,
    HEADER_CONTINUATION,
    HEADER_ENABLE_CROSS_PARTITION,
    HEADER_ETAG,
    HEADER_IF_MATCH,
    HEADER_IF_NONE_MATCH,
    HEADER_IS_QUERY,
    HEADER_IS_UPSERT,
    HEADER_ITEM_COUNT,
    HEADER_MAX_ITEM_COUNT,
    HEADER_PARTITION_KEY,
    HEADER_REQUEST_CHARGE,
    HEADER_SESSION_TOKEN,
)

from .exceptions import BadRequest


def _flag(request: Request, name: str) -> bool:
    return request.headers.get(name, "").lower() == "true"


def is_query(request: Request) -> bool:
    content_type = request.headers.get("Content-Type", "")
    return _flag(request, HEADER_IS_QUERY) or content_type.startswith(CONTENT_TYPE_QUERY_JSON)


def is_upsert(request: Request) -> bool:
    return _flag(request, HEADER_IS_UPSERT)


def cross_partition(request: Request) -> bool:
    return _flag(request, HEADER_ENABLE_CROSS_PARTITION)


def if_match(request: Request) -> Optional[str]:
    return request.headers.get(HEADER_IF_MATCH)


def if_none_match(request: Request) -> Optional[str]:
    return request.headers.get(HEADER_IF_NONE_MATCH)


def partition_key(request: Request) -> Optional[list[Any]]:
    """The JSON array sent in the partition key header, if any."""
    header = request.headers.get(HEADER_PARTITION_KEY)
    if header is None:
        return None
    try:
        value = json.loads(header)
    except ValueError:
        raise BadRequest(f"partition key header is not valid JSON: {header}") from None
    if not isinstance(value, list):
        raise BadRequest("partition key header must be a JSON array")
    return value


async def read_json(request: Request) -> Any:
    try:
        return json.loads(await request.body())
    except ValueError as e:
        raise BadRequest(f"request body is not valid JSON: {e}") from None


def resource_response(
    resource: dict[str, Any], status_code: int = 200, session_token: str = ""
) -> JSONResponse:
    headers = {HEADER_ETAG: resource["_etag"], HEADER_REQUEST_CHARGE: "1"}
    if session_token:
        headers[HEADER_SESSION_TOKEN] = session_token
    return JSONResponse(content=resource, status_code=status_code, headers=headers)


def empty_response(status_code: int = 204, session_token: str = "", etag: str = "") -> Response:
    headers = {HEADER_REQUEST_CHARGE: "1"}
    if session_token:
        headers[HEADER_SESSION_TOKEN] = session_token
    if etag:
        headers[HEADER_ETAG] = etag
    return Response(status_code=status_code, headers=headers)


def _page_size(request: Request, default: int) -> int:
    header = request.headers.get(HEADER_MAX_ITEM_COUNT)
    if header is None:
        return default
    try:
        size = int(header)
    except ValueError:
        raise BadRequest(f"invalid {HEADER_MAX_ITEM_COUNT}: {header}") from None
    return size if size > 0 else default


def _offset(request: Request) -> int:
    token = request.headers.get(HEADER_CONTINUATION)
    if not token:
        return 0
    try:
        offset = int(token)
    except ValueError:
        raise BadRequest(f"invalid continuation token: {token}") from None
    if offset < 0:
        raise BadRequest(f"invalid continuation token: {token}")
    return offset


def feed_response(
    request: Request,
    key: str,
    items: list[dict[str, Any]],
    owner_rid: str,
    default_page_size: int,
    session_token: str = "",
    etag: str = "",
) -> JSONResponse:
    """
    One page of a feed.

    The continuation token is the offset of the next page and is only sent
    while items remain.
    """
    start = _offset(request)
    size = _page_size(request, default_page_size)
    page = items[start : start + size]

    headers = {HEADER_ITEM_COUNT: str(len(page)), HEADER_REQUEST_CHARGE: "1"}
    if start + size < len(items):
        headers[HEADER_CONTINUATION] = str(start + size)
    if session_token:
        headers[HEADER_SESSION_TOKEN] = session_token
    if etag:
        headers[HEADER_ETAG] = etag
    return JSONResponse(
        content={"_rid": owner_rid, key: page, "_count": len(page)}, headers=headers
    )
