"""
Document database client.

This module contains the DocumentDBClient class which builds signed requests,
sends them through a pluggable Requester and interprets the responses: a
direct status switch for single-resource operations and the Paginator for
list and query feeds.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import aclosing, asynccontextmanager
from typing import Any, Optional

import httpx

from .auth import Authorizer
from .config import ClientConfig
from .exceptions import ConfigurationError, classify_response
from .headers import ResourceType
from .metadata import ResponseMetadata, get_response_metadata
from .models import DatabaseResource, OfferResource, decode_resource
from .options import RequestOptions
from .pagination import Page, PageConsumer, Paginator
from .query import Query
from .request import ClientRequest, RequestBuilder, TimeoutTypes, resource_path
from .resources.base import json_body, query_request, typed_consumer
from .resources.database import DatabaseClient
from .resources.offer import OfferClient
from .transport import (
    HTTPXRequester,
    LoggingRequester,
    Requester,
    RetryAfterRequester,
    close_requester,
)

DATABASES_KEY = "Databases"
OFFERS_KEY = "Offers"


class DocumentDBClient:
    """
    Asynchronous client for the document database REST API.

    Features:
    - Master-key signing of every request (pluggable Authorizer)
    - Pluggable transport; the default retries throttled (429) responses
    - Continuation-driven pagination for list and query feeds
    - Typed exception hierarchy with response metadata attached

    ```python
    config = ClientConfig.from_connection_string(os.environ["DOCDB_CONNECTION_STRING"])
    async with DocumentDBClient(config) as client:
        people = client.with_database("db1").with_collection("people")
        async for page in people.iter_documents(Query("SELECT * FROM c")):
            print(page.metadata.request_charge, len(page.items))
    ```
    """

    def __init__(
        self,
        config: ClientConfig,
        requester: Optional[Requester] = None,
        authorizer: Optional[Authorizer] = None,
    ):
        self.config = config
        self.authorizer: Authorizer = authorizer or config.master_key()
        self.builder = RequestBuilder(
            endpoint=config.endpoint,
            authorizer=self.authorizer,
            user_agent=config.user_agent,
            default_timeout=config.timeout.to_httpx_timeout(),
        )
        self._requester = requester
        self._owns_requester = requester is None
        self._paginator: Optional[Paginator] = None
        self._closed = False

        # Setup logging
        self.logger = logging.getLogger(config.logging.logger_name)
        self.logger.setLevel(getattr(logging, config.logging.level.upper()))

    async def __aenter__(self) -> "DocumentDBClient":
        """Async context manager entry."""
        await self._ensure_initialized()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_initialized(self) -> None:
        """Build the default transport stack if no requester was supplied."""
        if self._closed:
            raise ConfigurationError("client is closed")
        if self._requester is None:
            requester: Requester = HTTPXRequester(self.config)
            if self.config.logging.log_requests:
                requester = LoggingRequester(
                    requester,
                    logger=self.logger.getChild("transport"),
                    log_bodies=self.config.logging.log_bodies,
                )
            self._requester = RetryAfterRequester(
                requester, self.config.retry, logger=self.logger.getChild("retry")
            )
            self.logger.info(
                f"DocumentDBClient initialized with endpoint={self.config.endpoint}"
            )
        if self._paginator is None:
            self._paginator = Paginator(self.builder, self._requester)

    async def close(self) -> None:
        """Close the default transport. A supplied requester is left open."""
        if self._closed:
            return
        if self._requester is not None and self._owns_requester:
            await close_requester(self._requester)
            self.logger.info("DocumentDBClient closed")
        self._closed = True

    @property
    def requester(self) -> Optional[Requester]:
        return self._requester

    def new_request(
        self, request: ClientRequest, timeout: TimeoutTypes = None
    ) -> httpx.Request:
        """
        Build a signed request that any Requester can send.

        The body is buffered first so it stays readable after the request
        has been built.
        """
        return self.builder.build(request.ensure_replayable(), timeout)

    async def _send(self, request: httpx.Request) -> httpx.Response:
        await self._ensure_initialized()
        assert self._requester is not None
        return await self._requester.send(request)

    async def create_or_replace_resource(
        self, request: ClientRequest, timeout: TimeoutTypes = None
    ) -> tuple[bytes, ResponseMetadata]:
        """
        Create a resource (POST) or replace one (PUT).

        An empty method means POST; any method but PUT or POST is rejected
        before anything is sent. 200 and 201 are success.

        Returns:
            The response body and its metadata
        """
        method = request.method.upper() or "POST"
        if method not in ("POST", "PUT"):
            raise ConfigurationError(
                f"Invalid request method '{request.method}'; must be either PUT or POST"
            )
        response = await self._send(self.new_request(request.with_method(method), timeout))
        metadata = get_response_metadata(response)
        if response.status_code in (200, 201):
            return response.content, metadata
        raise classify_response(response, metadata=metadata)

    async def get_resource(
        self, request: ClientRequest, timeout: TimeoutTypes = None
    ) -> tuple[bytes, ResponseMetadata]:
        """Read a single resource. Only 200 is success."""
        response = await self._send(self.new_request(request.with_method("GET"), timeout))
        metadata = get_response_metadata(response)
        if response.status_code == 200:
            return response.content, metadata
        raise classify_response(response, metadata=metadata)

    async def delete_resource(
        self, request: ClientRequest, timeout: TimeoutTypes = None
    ) -> tuple[bool, ResponseMetadata]:
        """Delete a single resource. 204 is success and returns True."""
        response = await self._send(self.new_request(request.with_method("DELETE"), timeout))
        metadata = get_response_metadata(response)
        if response.status_code == 204:
            return True, metadata
        raise classify_response(response, metadata=metadata)

    async def list_resources(
        self,
        key: str,
        request: ClientRequest,
        fn: PageConsumer,
        timeout: TimeoutTypes = None,
    ) -> None:
        """
        Walk a list (GET) or query (POST) feed, handing each page to ``fn``.

        ``fn(items, metadata)`` returns True to request the next page and
        False to stop without error; raising aborts the walk.

        Raises:
            ResourceNotModifiedError: on 304
            KeyNotFoundError: if a page lacks ``key``
        """
        await self._ensure_initialized()
        assert self._paginator is not None
        await self._paginator.run(key, request, fn, timeout)

    async def paginate(
        self,
        key: str,
        request: ClientRequest,
        timeout: TimeoutTypes = None,
    ) -> AsyncIterator[Page]:
        """Iterate the pages of a feed; breaking out of the loop stops paging."""
        await self._ensure_initialized()
        assert self._paginator is not None
        async with aclosing(self._paginator.pages(key, request, timeout)) as pages:
            async for page in pages:
                yield page

    # Account-level resources

    async def create_database_raw(
        self,
        id: str,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> tuple[bytes, ResponseMetadata]:
        body = DatabaseResource(id=id).to_body()
        return await self.create_or_replace_resource(
            ClientRequest(
                path="/dbs",
                resource_type=ResourceType.DATABASES,
                resource_link="",
                options=options,
                body=json_body(body),
            ),
            timeout,
        )

    async def create_database(
        self,
        id: str,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> tuple[DatabaseResource, ResponseMetadata]:
        """Create a new database with the given id."""
        body, metadata = await self.create_database_raw(id, options, timeout)
        return decode_resource(DatabaseResource, body), metadata

    def _databases_request(self, options: Optional[RequestOptions]) -> ClientRequest:
        return ClientRequest(
            path="/dbs",
            resource_type=ResourceType.DATABASES,
            resource_link="",
            options=options,
        )

    async def list_databases_raw(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        await self.list_resources(DATABASES_KEY, self._databases_request(options), fn, timeout)

    async def list_databases(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        """List every database; ``fn`` receives DatabaseResource pages."""
        await self.list_databases_raw(typed_consumer(DatabaseResource, fn), options, timeout)

    async def query_databases_raw(
        self, query: Query, fn: PageConsumer, timeout: TimeoutTypes = None
    ) -> None:
        await self.list_resources(
            DATABASES_KEY, query_request(query, self._databases_request(None)), fn, timeout
        )

    async def query_databases(
        self, query: Query, fn: PageConsumer, timeout: TimeoutTypes = None
    ) -> None:
        await self.query_databases_raw(query, typed_consumer(DatabaseResource, fn), timeout)

    def with_database(self, id: str) -> DatabaseClient:
        """Scope further calls to one database."""
        return DatabaseClient(self, id)

    def _offers_request(self, options: Optional[RequestOptions]) -> ClientRequest:
        return ClientRequest(
            path="/offers",
            resource_type=ResourceType.OFFERS,
            resource_link="",
            options=options,
        )

    async def list_offers_raw(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        await self.list_resources(OFFERS_KEY, self._offers_request(options), fn, timeout)

    async def list_offers(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        """List every offer in the account; ``fn`` receives OfferResource pages."""
        await self.list_offers_raw(typed_consumer(OfferResource, fn), options, timeout)

    async def query_offers_raw(
        self, query: Query, fn: PageConsumer, timeout: TimeoutTypes = None
    ) -> None:
        await self.list_resources(
            OFFERS_KEY, query_request(query, self._offers_request(None)), fn, timeout
        )

    async def query_offers(
        self, query: Query, fn: PageConsumer, timeout: TimeoutTypes = None
    ) -> None:
        await self.query_offers_raw(query, typed_consumer(OfferResource, fn), timeout)

    def with_offer(self, id: str) -> OfferClient:
        return OfferClient(self, id)

    async def replace_offer(
        self,
        offer: OfferResource,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> tuple[OfferResource, ResponseMetadata]:
        """
        Replace an offer, e.g. to change the throughput of a collection.

        The offer is addressed by its ``_rid``.
        """
        if not offer.rid:
            raise ConfigurationError("offer resource id (_rid) is required to replace an offer")
        body, metadata = await self.create_or_replace_resource(
            ClientRequest(
                method="PUT",
                path=resource_path("offers", offer.rid),
                resource_type=ResourceType.OFFERS,
                resource_link=offer.rid.lower(),
                options=options,
                body=json_body(offer.to_body()),
            ),
            timeout,
        )
        return decode_resource(OfferResource, body), metadata


@asynccontextmanager
async def create_client(
    config: ClientConfig,
    requester: Optional[Requester] = None,
) -> AsyncGenerator[DocumentDBClient, None]:
    """
    Async context manager for creating and managing a client.

    Args:
        config: Client configuration
        requester: Optional transport; the default stack is built otherwise

    Yields:
        Configured DocumentDBClient instance
    """
    client = DocumentDBClient(config, requester=requester)
    try:
        await client._ensure_initialized()
        yield client
    finally:
        await client.close()
