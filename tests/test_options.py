"""Tests for request options and their composition."""

from datetime import datetime, timezone

import httpx
import pytest

from docdb.headers import ConsistencyLevel
from docdb.options import (
    CHANGE_FEED_A_IM,
    CommonRequestOptions,
    RequestOptions,
    RequestOptionsFunc,
    RequestOptionsList,
    chain_options,
)
from docdb.query import Query


def _request(method: str) -> httpx.Request:
    return httpx.Request(method, "https://account.example.com/dbs")


def _setter(name: str, value: str) -> RequestOptionsFunc:
    return RequestOptionsFunc(lambda request: request.headers.__setitem__(name, value))


class TestCommonRequestOptions:
    """Test which headers are applied for which verbs."""

    @pytest.mark.parametrize("method,expected", [("PUT", True), ("POST", True), ("GET", False)])
    def test_content_type_only_on_writes(self, method, expected):
        request = _request(method)
        CommonRequestOptions(content_type="application/json").apply_options(request)
        assert ("Content-Type" in request.headers) is expected

    @pytest.mark.parametrize(
        "method,expected", [("PUT", True), ("DELETE", True), ("POST", False), ("GET", False)]
    )
    def test_if_match_only_on_put_and_delete(self, method, expected):
        request = _request(method)
        CommonRequestOptions(if_match='"etag"').apply_options(request)
        assert ("If-Match" in request.headers) is expected

    def test_if_none_match_only_on_get(self):
        get, post = _request("GET"), _request("POST")
        options = CommonRequestOptions(if_none_match='"etag"')
        options.apply_options(get)
        options.apply_options(post)
        assert get.headers["If-None-Match"] == '"etag"'
        assert "If-None-Match" not in post.headers

    def test_if_none_match_wins_over_if_modified_since(self):
        request = _request("GET")
        CommonRequestOptions(
            if_none_match='"etag"', if_modified_since=datetime(2020, 1, 1, tzinfo=timezone.utc)
        ).apply_options(request)
        assert "If-Modified-Since" not in request.headers

    def test_if_modified_since_is_rfc1123(self):
        request = _request("GET")
        CommonRequestOptions(
            if_modified_since=datetime(2020, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        ).apply_options(request)
        assert request.headers["If-Modified-Since"] == "Thu, 02 Jan 2020 03:04:05 GMT"

    def test_verb_independent_headers(self):
        request = _request("POST")
        CommonRequestOptions(
            activity_id="a1",
            session_token="0:5",
            consistency_level=ConsistencyLevel.SESSION,
            partition_key='["p"]',
            partition_key_range_id="0",
            enable_cross_partition=True,
            change_feed=True,
            max_item_count=10,
            continuation="tok",
        ).apply_options(request)

        headers = request.headers
        assert headers["x-ms-activity-id"] == "a1"
        assert headers["x-ms-session-token"] == "0:5"
        assert headers["x-ms-consistency-level"] == "Session"
        assert headers["x-ms-documentdb-partitionkey"] == '["p"]'
        assert headers["x-ms-documentdb-partitionkeyrangeid"] == "0"
        assert headers["x-ms-documentdb-query-enablecrosspartition"] == "true"
        assert headers["A-IM"] == CHANGE_FEED_A_IM
        assert headers["x-ms-max-item-count"] == "10"
        assert headers["x-ms-continuation"] == "tok"

    def test_unset_fields_add_nothing(self):
        request = _request("GET")
        before = dict(request.headers)
        CommonRequestOptions().apply_options(request)
        assert dict(request.headers) == before

    def test_invalid_consistency_level(self):
        with pytest.raises(ValueError):
            CommonRequestOptions(consistency_level="Sometimes").apply_options(_request("GET"))


class TestComposition:
    """Test RequestOptionsList and chain_options."""

    def test_list_applies_in_order_and_skips_none(self):
        request = _request("GET")
        RequestOptionsList([_setter("x-a", "1"), None, _setter("x-a", "2")]).apply_options(request)
        assert request.headers["x-a"] == "2"

    def test_append_returns_new_list(self):
        base = RequestOptionsList([_setter("x-a", "1")])
        extended = base.append(_setter("x-b", "2"))
        assert len(base) == 1
        assert len(extended) == 2

    def test_chain_of_nothing_is_none(self):
        assert chain_options(None, None) is None

    def test_chain_of_one_is_that_option(self):
        option = _setter("x-a", "1")
        assert chain_options(None, option) is option

    def test_chain_of_many_is_a_list(self):
        chained = chain_options(_setter("x-a", "1"), None, _setter("x-b", "2"))
        assert isinstance(chained, RequestOptionsList)
        assert len(chained) == 2

    def test_protocol_is_runtime_checkable(self):
        assert isinstance(CommonRequestOptions(), RequestOptions)
        assert isinstance(_setter("x", "y"), RequestOptions)
        assert not isinstance(object(), RequestOptions)

    @pytest.mark.parametrize("method", ["GET", "POST", "PUT"])
    def test_applying_twice_equals_applying_once(self, method):
        chain = RequestOptionsList(
            [
                CommonRequestOptions(
                    activity_id="a1",
                    content_type="application/json",
                    if_match='"1"',
                    if_none_match='"2"',
                    session_token="0:5",
                ),
                Query("SELECT * FROM c", max_item_count=5, enable_cross_partition=True),
                _setter("x-custom", "v"),
            ]
        )
        once, twice = _request(method), _request(method)

        chain.apply_options(once)
        chain.apply_options(twice)
        chain.apply_options(twice)

        assert dict(twice.headers) == dict(once.headers)
        assert once.headers["x-custom"] == "v"
