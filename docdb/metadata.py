"""Structured view of the well-known response headers."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from email.utils import parsedate_to_datetime
from typing import Optional

import httpx

from .headers import (
    HEADER_ACTIVITY_ID,
    HEADER_ALT_CONTENT_PATH,
    HEADER_CONTINUATION,
    HEADER_DATE,
    HEADER_ETAG,
    HEADER_ITEM_COUNT,
    HEADER_REQUEST_CHARGE,
    HEADER_RESOURCE_QUOTA,
    HEADER_RESOURCE_USAGE,
    HEADER_RETRY_AFTER_MS,
    HEADER_SCHEMA_VERSION,
    HEADER_SERVICE_VERSION,
    HEADER_SESSION_TOKEN,
)


@dataclass(frozen=True)
class ResponseMetadata:
    """
    Parsed header values of a single response.

    String headers that are absent are empty strings. Numeric and date
    headers that are absent or malformed are None.
    """

    date: Optional[datetime] = None
    etag: str = ""
    activity_id: str = ""
    alt_content_path: str = ""
    continuation: str = ""
    request_charge: Optional[float] = None
    resource_quota: str = ""
    resource_usage: str = ""
    retry_after: Optional[timedelta] = None
    schema_version: str = ""
    service_version: str = ""
    session_token: str = ""
    item_count: Optional[int] = None


def _parse_date(value: str) -> Optional[datetime]:
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def _parse_float(value: str) -> Optional[float]:
    try:
        return float(value)
    except ValueError:
        return None


def get_response_metadata(response: Optional[httpx.Response]) -> ResponseMetadata:
    """
    Extract response metadata from the HTTP headers.

    Values are converted to native types where applicable. A header that
    fails to parse is left unset rather than raising, so metadata extraction
    never masks the status handling that follows it.

    Repeated headers are joined by httpx with ", "; the joined text is what
    ends up in the string fields.
    """
    if response is None:
        return ResponseMetadata()

    headers = response.headers
    date = headers.get(HEADER_DATE)
    charge = headers.get(HEADER_REQUEST_CHARGE)
    retry_after_ms = headers.get(HEADER_RETRY_AFTER_MS)
    item_count = headers.get(HEADER_ITEM_COUNT)

    retry_after = None
    if retry_after_ms:
        millis = _parse_float(retry_after_ms)
        if millis is not None:
            retry_after = timedelta(milliseconds=millis)

    return ResponseMetadata(
        date=_parse_date(date) if date else None,
        etag=headers.get(HEADER_ETAG, ""),
        activity_id=headers.get(HEADER_ACTIVITY_ID, ""),
        alt_content_path=headers.get(HEADER_ALT_CONTENT_PATH, ""),
        continuation=headers.get(HEADER_CONTINUATION, ""),
        request_charge=_parse_float(charge) if charge else None,
        resource_quota=headers.get(HEADER_RESOURCE_QUOTA, ""),
        resource_usage=headers.get(HEADER_RESOURCE_USAGE, ""),
        retry_after=retry_after,
        schema_version=headers.get(HEADER_SCHEMA_VERSION, ""),
        service_version=headers.get(HEADER_SERVICE_VERSION, ""),
        session_token=headers.get(HEADER_SESSION_TOKEN, ""),
        item_count=_parse_int(item_count) if item_count else None,
    )
