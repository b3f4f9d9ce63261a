"""Tests for response metadata extraction."""

from datetime import datetime, timedelta, timezone

import httpx

from docdb.metadata import ResponseMetadata, get_response_metadata


class TestResponseMetadata:
    """Test header parsing into ResponseMetadata."""

    def test_none_response(self):
        assert get_response_metadata(None) == ResponseMetadata()

    def test_all_headers(self):
        response = httpx.Response(
            200,
            headers={
                "Date": "Tue, 15 Nov 1994 08:12:31 GMT",
                "ETag": '"00000"',
                "x-ms-activity-id": "act",
                "x-ms-alt-content-path": "dbs/db1",
                "x-ms-continuation": "next",
                "x-ms-request-charge": "2.5",
                "x-ms-resource-quota": "documentsSize=100",
                "x-ms-resource-usage": "documentsSize=1",
                "x-ms-retry-after-ms": "1500",
                "x-ms-schemaversion": "1.1",
                "x-ms-serviceversion": "version=1.2",
                "x-ms-session-token": "0:7",
                "x-ms-item-count": "3",
            },
        )
        metadata = get_response_metadata(response)

        assert metadata.date == datetime(1994, 11, 15, 8, 12, 31, tzinfo=timezone.utc)
        assert metadata.etag == '"00000"'
        assert metadata.activity_id == "act"
        assert metadata.alt_content_path == "dbs/db1"
        assert metadata.continuation == "next"
        assert metadata.request_charge == 2.5
        assert metadata.resource_quota == "documentsSize=100"
        assert metadata.resource_usage == "documentsSize=1"
        assert metadata.retry_after == timedelta(milliseconds=1500)
        assert metadata.schema_version == "1.1"
        assert metadata.service_version == "version=1.2"
        assert metadata.session_token == "0:7"
        assert metadata.item_count == 3

    def test_absent_headers(self):
        metadata = get_response_metadata(httpx.Response(200))
        assert metadata.continuation == ""
        assert metadata.session_token == ""
        assert metadata.request_charge is None
        assert metadata.item_count is None
        assert metadata.retry_after is None
        assert metadata.date is None

    def test_malformed_numbers_and_dates_are_unset(self):
        response = httpx.Response(
            200,
            headers={
                "Date": "yesterday",
                "x-ms-request-charge": "lots",
                "x-ms-item-count": "3.5",
                "x-ms-retry-after-ms": "soon",
            },
        )
        metadata = get_response_metadata(response)
        assert metadata.date is None
        assert metadata.request_charge is None
        assert metadata.item_count is None
        assert metadata.retry_after is None

    def test_repeated_header_is_joined(self):
        response = httpx.Response(
            200, headers=[("x-ms-continuation", "a"), ("x-ms-continuation", "b")]
        )
        assert get_response_metadata(response).continuation == "a, b"
