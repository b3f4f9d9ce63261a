"""Tests for request descriptors and the request builder."""

import io

import httpx
import pytest

from docdb.auth import MasterKey
from docdb.exceptions import ConfigurationError
from docdb.headers import DEFAULT_USER_AGENT, ResourceType
from docdb.options import RequestOptionsFunc
from docdb.request import ClientRequest, RequestBuilder, resource_link, resource_path

from .conftest import ENDPOINT, FIXED_DATE, TEST_KEY


class TestPaths:
    """Test resource links and URL paths."""

    def test_resource_link_is_raw(self):
        assert resource_link("dbs", "my db", "colls", "A/B") == "dbs/my db/colls/A/B"

    def test_resource_path_escapes_each_segment(self):
        assert resource_path("dbs", "my db", "colls", "a/b") == "/dbs/my%20db/colls/a%2Fb"


class TestClientRequest:
    """Test body handling of a logical request."""

    def test_bytes_body_reads_repeatedly(self):
        request = ClientRequest(method="POST", body=b"{}")
        assert request.read_body() == b"{}"
        assert request.read_body() == b"{}"

    def test_str_body_is_utf8(self):
        assert ClientRequest(body="é").read_body() == "é".encode("utf-8")

    def test_stream_body_must_be_made_replayable(self):
        request = ClientRequest(body=iter([b"a", b"b"]))
        with pytest.raises(ConfigurationError):
            request.read_body()

    def test_ensure_replayable_drains_stream_once(self):
        chunks = iter([b"{", b"}"])
        replayable = ClientRequest(body=chunks).ensure_replayable()
        assert replayable.read_body() == b"{}"
        assert replayable.read_body() == b"{}"
        assert replayable.get_body() == b"{}"

    def test_ensure_replayable_reads_file_like(self):
        replayable = ClientRequest(body=io.BytesIO(b"[1]")).ensure_replayable()
        assert replayable.read_body() == b"[1]"

    def test_get_body_used_when_body_unset(self):
        request = ClientRequest(get_body=lambda: b"x").ensure_replayable()
        assert request.body == b"x"

    def test_no_body(self):
        request = ClientRequest()
        assert request.ensure_replayable() is request
        assert request.read_body() is None

    def test_with_method_upper_cases(self):
        assert ClientRequest(method="get").with_method("put").method == "PUT"


class TestRequestBuilder:
    """Test assembly of signed transport requests."""

    def _builder(self, **kwargs) -> RequestBuilder:
        return RequestBuilder(ENDPOINT + "/", MasterKey(TEST_KEY, clock=lambda: FIXED_DATE), **kwargs)

    def test_method_required(self):
        with pytest.raises(ConfigurationError):
            self._builder().build(ClientRequest(path="/dbs"))

    def test_url_join(self):
        request = self._builder().build(ClientRequest(method="GET", path="/dbs/db1"))
        assert str(request.url) == "https://account.example.com/dbs/db1"

    def test_default_user_agent(self):
        request = self._builder().build(ClientRequest(method="GET", path="/dbs"))
        assert request.headers["User-Agent"] == DEFAULT_USER_AGENT

    def test_custom_user_agent(self):
        request = self._builder(user_agent="app/2").build(ClientRequest(method="GET", path="/dbs"))
        assert request.headers["User-Agent"] == "app/2"

    def test_body_is_sent(self):
        request = self._builder().build(ClientRequest(method="POST", path="/dbs", body=b'{"id":"x"}'))
        assert request.content == b'{"id":"x"}'

    def test_authorization_runs_after_options(self):
        """An option that overrides x-ms-date cannot desynchronize the signature."""

        def set_date(request: httpx.Request) -> None:
            request.headers["x-ms-date"] = "bogus"

        request = self._builder().build(
            ClientRequest(
                method="GET",
                path="/dbs/db1/colls/col1/docs",
                resource_type=ResourceType.DOCUMENTS,
                resource_link="dbs/db1/colls/col1",
                options=RequestOptionsFunc(set_date),
            )
        )
        assert request.headers["x-ms-date"] == "Thu, 01 Jan 1970 00:00:00 GMT"
        assert "OMgaSSxbRARSEQKrDLRP" in request.headers["Authorization"]

    def test_timeout_extension(self):
        request = self._builder().build(ClientRequest(method="GET", path="/dbs"), timeout=2.5)
        assert request.extensions["timeout"]["read"] == 2.5

    def test_default_timeout_extension(self):
        builder = self._builder(default_timeout=httpx.Timeout(7.0))
        request = builder.build(ClientRequest(method="GET", path="/dbs"))
        assert request.extensions["timeout"]["connect"] == 7.0

    def test_no_timeout_extension_by_default(self):
        request = self._builder().build(ClientRequest(method="GET", path="/dbs"))
        assert "timeout" not in request.extensions
