"""Helpers shared by the resource wrappers."""

import inspect
import json
from collections.abc import AsyncIterator
from contextlib import aclosing
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Optional, Protocol

from pydantic import BaseModel

from ..exceptions import ConfigurationError
from ..metadata import ResponseMetadata
from ..models import decode_resource
from ..options import chain_options
from ..pagination import Page, PageConsumer
from ..query import Query
from ..request import ClientRequest

if TYPE_CHECKING:
    from ..client import DocumentDBClient


class HasBody(Protocol):
    document: Any
    body: Optional[bytes]


def json_body(value: Any) -> bytes:
    return json.dumps(value, separators=(",", ":")).encode("utf-8")


def document_or_body(request: HasBody, name: str) -> bytes:
    """
    Serialize exactly one of ``document`` or ``body``.

    Setting neither or both is a configuration error.
    """
    has_document = request.document is not None
    has_body = bool(request.body)
    if has_document == has_body:
        raise ConfigurationError(f"must set either a document or a body for {name}")
    if has_body:
        return bytes(request.body)  # type: ignore[arg-type]
    document = request.document
    if isinstance(document, BaseModel):
        return document.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
    return json_body(document)


def query_request(query: Optional[Query], request: ClientRequest) -> ClientRequest:
    """
    Turn a feed request into a POST query carrying ``query``.

    The query's own options apply after any the request already has.
    """
    if query is None:
        raise ConfigurationError("query cannot be None")
    return replace(
        request,
        method="POST",
        options=chain_options(request.options, query),
        body=query.to_json(),
    )


def typed_consumer(model: type[BaseModel], fn: PageConsumer) -> PageConsumer:
    """Wrap ``fn`` so it receives decoded models instead of raw items."""

    async def consume(items: list[Any], metadata: ResponseMetadata) -> bool:
        resources = [decode_resource(model, item) for item in items]
        result = fn(resources, metadata)
        if inspect.isawaitable(result):
            result = await result
        return bool(result)

    return consume


async def typed_pages(
    model: type[BaseModel], pages: AsyncIterator[Page]
) -> AsyncIterator[Page]:
    async with aclosing(pages) as stream:  # type: ignore[type-var]
        async for page in stream:
            yield Page(
                items=[decode_resource(model, item) for item in page.items],
                metadata=page.metadata,
            )


class ResourceClient:
    """Base of the scoped wrappers: remembers the client and the resource link."""

    def __init__(self, client: "DocumentDBClient"):
        self.client = client

    @property
    def resource_link(self) -> str:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.resource_link!r})"
