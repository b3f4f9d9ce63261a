"""Shared fixtures: a scripted transport and a client that signs with a fixed clock."""

import base64
from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import pytest

from docdb import ClientConfig, DocumentDBClient, MasterKey

TEST_KEY = b"testkey"
TEST_KEY_B64 = base64.b64encode(TEST_KEY).decode("ascii")  # dGVzdGtleQ==
FIXED_DATE = datetime(1970, 1, 1, tzinfo=timezone.utc)
ENDPOINT = "https://account.example.com"


class ScriptedRequester:
    """Replays queued responses in order and records every request it was given."""

    def __init__(self):
        self.responses: list[Any] = []
        self.requests: list[httpx.Request] = []
        self.closed = False

    def add(
        self,
        status_code: int = 200,
        json: Any = None,
        headers: Optional[Any] = None,
        content: Optional[bytes] = None,
    ) -> "ScriptedRequester":
        kwargs: dict[str, Any] = {"headers": headers}
        if content is not None:
            kwargs["content"] = content
        elif json is not None:
            kwargs["json"] = json
        self.responses.append((status_code, kwargs))
        return self

    def add_error(self, exc: Exception) -> "ScriptedRequester":
        self.responses.append(exc)
        return self

    async def send(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"unexpected request {request.method} {request.url}")
        scripted = self.responses.pop(0)
        if isinstance(scripted, Exception):
            raise scripted
        status_code, kwargs = scripted
        return httpx.Response(status_code, request=request, **kwargs)

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def requester() -> ScriptedRequester:
    return ScriptedRequester()


@pytest.fixture
def master_key() -> MasterKey:
    return MasterKey(TEST_KEY, clock=lambda: FIXED_DATE)


@pytest.fixture
def config() -> ClientConfig:
    return ClientConfig(endpoint=ENDPOINT, account_key=TEST_KEY_B64)


@pytest.fixture
async def client(config, requester, master_key):
    async with DocumentDBClient(config, requester=requester, authorizer=master_key) as c:
        yield c
