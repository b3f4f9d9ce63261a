"""Database-scoped operations and collection creation."""

from dataclasses import dataclass
from typing import Optional, Union

import httpx

from ..exceptions import ConfigurationError
from ..headers import HEADER_OFFER_THROUGHPUT, HEADER_OFFER_TYPE, OfferType, ResourceType
from ..metadata import ResponseMetadata
from ..models import (
    CollectionResource,
    DatabaseResource,
    IndexingPolicy,
    PartitionKeyDefinition,
    decode_resource,
)
from ..options import RequestOptions
from ..pagination import PageConsumer
from ..request import ClientRequest, TimeoutTypes, resource_link, resource_path
from .base import ResourceClient, json_body, typed_consumer
from .collection import CollectionClient

COLLECTIONS_KEY = "DocumentCollections"


@dataclass
class CreateCollectionRequest:
    """
    Parameters for creating a collection.

    Throughput is provisioned either as a number of request units
    (``offer_throughput``) or as a pre-defined ``offer_type``, never both.
    """

    id: str
    indexing_policy: Optional[IndexingPolicy] = None
    partition_key: Optional[PartitionKeyDefinition] = None
    offer_throughput: int = 0
    offer_type: Union[OfferType, str, None] = None
    options: Optional[RequestOptions] = None

    def validate(self) -> None:
        if self.offer_throughput and self.offer_type:
            raise ConfigurationError("set either offer_throughput or offer_type, not both")

    def to_json(self) -> bytes:
        body = CollectionResource(
            id=self.id,
            indexing_policy=self.indexing_policy,
            partition_key=self.partition_key,
        )
        return json_body(body.to_body())

    def apply_options(self, request: httpx.Request) -> None:
        if self.offer_throughput:
            request.headers[HEADER_OFFER_THROUGHPUT] = str(self.offer_throughput)
        elif self.offer_type:
            request.headers[HEADER_OFFER_TYPE] = OfferType(self.offer_type).value
        if self.options is not None:
            self.options.apply_options(request)


class DatabaseClient(ResourceClient):
    """Client scoped to a single database."""

    def __init__(self, client, database_id: str):
        super().__init__(client)
        self.database_id = database_id

    @property
    def resource_link(self) -> str:
        return resource_link("dbs", self.database_id)

    @property
    def path(self) -> str:
        return resource_path("dbs", self.database_id)

    def _request(self, options: Optional[RequestOptions]) -> ClientRequest:
        return ClientRequest(
            path=self.path,
            resource_type=ResourceType.DATABASES,
            resource_link=self.resource_link,
            options=options,
        )

    async def get_raw(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[bytes, ResponseMetadata]:
        return await self.client.get_resource(self._request(options), timeout)

    async def get(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[DatabaseResource, ResponseMetadata]:
        body, metadata = await self.get_raw(options, timeout)
        return decode_resource(DatabaseResource, body), metadata

    async def delete(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[bool, ResponseMetadata]:
        """Delete the database and everything in it."""
        return await self.client.delete_resource(self._request(options), timeout)

    def _collections_request(self, options: Optional[RequestOptions]) -> ClientRequest:
        return ClientRequest(
            path=f"{self.path}/colls",
            resource_type=ResourceType.COLLECTIONS,
            resource_link=self.resource_link,
            options=options,
        )

    async def create_collection_raw(
        self, request: CreateCollectionRequest, timeout: TimeoutTypes = None
    ) -> tuple[bytes, ResponseMetadata]:
        request.validate()
        client_request = self._collections_request(request)
        client_request.body = request.to_json()
        return await self.client.create_or_replace_resource(client_request, timeout)

    async def create_collection(
        self, request: CreateCollectionRequest, timeout: TimeoutTypes = None
    ) -> tuple[CollectionResource, ResponseMetadata]:
        body, metadata = await self.create_collection_raw(request, timeout)
        return decode_resource(CollectionResource, body), metadata

    async def list_collections_raw(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        await self.client.list_resources(
            COLLECTIONS_KEY, self._collections_request(options), fn, timeout
        )

    async def list_collections(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        """List the collections; ``fn`` receives CollectionResource pages."""
        await self.list_collections_raw(
            typed_consumer(CollectionResource, fn), options, timeout
        )

    def with_collection(self, id: str) -> CollectionClient:
        return CollectionClient(self.client, self.database_id, id)
