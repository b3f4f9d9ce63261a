"""Collection-scoped operations: documents, stored procedures and UDFs."""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx

from ..headers import (
    HEADER_INDEXING_DIRECTIVE,
    HEADER_IS_UPSERT,
    HEADER_PARTITION_KEY,
    IndexingDirective,
    ResourceType,
)
from ..metadata import ResponseMetadata
from ..models import (
    CollectionResource,
    DocumentProperties,
    ModelT,
    StoredProcedureResource,
    UserDefinedFunctionResource,
    decode_resource,
)
from ..options import RequestOptions
from ..pagination import Page, PageConsumer
from ..query import Query
from ..request import ClientRequest, TimeoutTypes, resource_link, resource_path
from .base import (
    ResourceClient,
    document_or_body,
    json_body,
    query_request,
    typed_consumer,
    typed_pages,
)
from .document import DocumentClient, partition_key_header
from .scripts import (
    CreateStoredProcedureRequest,
    CreateUserDefinedFunctionRequest,
    StoredProcedureClient,
    UserDefinedFunctionClient,
)

DOCUMENTS_KEY = "Documents"
STORED_PROCEDURES_KEY = "StoredProcedures"
USER_DEFINED_FUNCTIONS_KEY = "UserDefinedFunctions"


@dataclass
class CreateDocumentRequest:
    """
    Parameters for creating (or upserting) a document.

    Exactly one of ``document`` (any JSON-serializable value or pydantic
    model) and ``body`` (JSON bytes) must be set.
    """

    document: Any = None
    body: Optional[bytes] = None
    partition_key: Optional[list[Any]] = None
    upsert: bool = False
    indexing_directive: Union[IndexingDirective, str, None] = None
    options: Optional[RequestOptions] = None

    def to_json(self) -> bytes:
        return document_or_body(self, "CreateDocumentRequest")

    def apply_options(self, request: httpx.Request) -> None:
        if self.upsert:
            request.headers[HEADER_IS_UPSERT] = "true"
        if self.partition_key:
            request.headers[HEADER_PARTITION_KEY] = partition_key_header(self.partition_key)
        if self.indexing_directive:
            request.headers[HEADER_INDEXING_DIRECTIVE] = IndexingDirective(
                self.indexing_directive
            ).value
        if self.options is not None:
            self.options.apply_options(request)


class CollectionClient(ResourceClient):
    """Client scoped to a single collection."""

    def __init__(self, client, database_id: str, collection_id: str):
        super().__init__(client)
        self.database_id = database_id
        self.collection_id = collection_id

    @property
    def resource_link(self) -> str:
        return resource_link("dbs", self.database_id, "colls", self.collection_id)

    @property
    def path(self) -> str:
        return resource_path("dbs", self.database_id, "colls", self.collection_id)

    def _request(
        self,
        resource_type: ResourceType,
        options: Optional[RequestOptions],
        feed: str = "",
    ) -> ClientRequest:
        return ClientRequest(
            path=f"{self.path}/{feed}" if feed else self.path,
            resource_type=resource_type,
            resource_link=self.resource_link,
            options=options,
        )

    async def get_raw(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[bytes, ResponseMetadata]:
        return await self.client.get_resource(
            self._request(ResourceType.COLLECTIONS, options), timeout
        )

    async def get(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[CollectionResource, ResponseMetadata]:
        body, metadata = await self.get_raw(options, timeout)
        return decode_resource(CollectionResource, body), metadata

    async def delete(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[bool, ResponseMetadata]:
        return await self.client.delete_resource(
            self._request(ResourceType.COLLECTIONS, options), timeout
        )

    # Documents

    async def create_document_raw(
        self, request: CreateDocumentRequest, timeout: TimeoutTypes = None
    ) -> tuple[bytes, ResponseMetadata]:
        client_request = self._request(ResourceType.DOCUMENTS, request, "docs")
        client_request.body = request.to_json()
        return await self.client.create_or_replace_resource(client_request, timeout)

    async def create_document(
        self,
        request: CreateDocumentRequest,
        model: type[ModelT] = DocumentProperties,  # type: ignore[assignment]
        timeout: TimeoutTypes = None,
    ) -> tuple[ModelT, ResponseMetadata]:
        """Create a document and decode the stored version into ``model``."""
        body, metadata = await self.create_document_raw(request, timeout)
        return decode_resource(model, body), metadata

    async def list_documents_raw(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        await self.client.list_resources(
            DOCUMENTS_KEY, self._request(ResourceType.DOCUMENTS, options, "docs"), fn, timeout
        )

    async def list_documents(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        model: type[ModelT] = DocumentProperties,  # type: ignore[assignment]
        timeout: TimeoutTypes = None,
    ) -> None:
        await self.list_documents_raw(typed_consumer(model, fn), options, timeout)

    async def query_documents_raw(
        self, query: Query, fn: PageConsumer, timeout: TimeoutTypes = None
    ) -> None:
        """Post ``query`` to the collection and page through the results."""
        await self.client.list_resources(
            DOCUMENTS_KEY,
            query_request(query, self._request(ResourceType.DOCUMENTS, None, "docs")),
            fn,
            timeout,
        )

    async def query_documents(
        self,
        query: Query,
        fn: PageConsumer,
        model: type[ModelT] = DocumentProperties,  # type: ignore[assignment]
        timeout: TimeoutTypes = None,
    ) -> None:
        await self.query_documents_raw(query, typed_consumer(model, fn), timeout)

    def iter_documents(
        self,
        query: Optional[Query] = None,
        options: Optional[RequestOptions] = None,
        model: Optional[type[ModelT]] = None,
        timeout: TimeoutTypes = None,
    ) -> AsyncIterator[Page]:
        """
        Iterate document pages: the whole feed, or the results of ``query``.

        Items are raw JSON values unless ``model`` is given.
        """
        request = self._request(ResourceType.DOCUMENTS, options, "docs")
        if query is not None:
            request = query_request(query, request)
        pages = self.client.paginate(DOCUMENTS_KEY, request, timeout)
        return typed_pages(model, pages) if model is not None else pages

    def with_document(
        self, id: str, partition_key: Optional[list[Any]] = None
    ) -> DocumentClient:
        return DocumentClient(
            self.client, self.database_id, self.collection_id, id, partition_key
        )

    # Stored procedures

    async def create_stored_procedure(
        self, request: CreateStoredProcedureRequest, timeout: TimeoutTypes = None
    ) -> tuple[StoredProcedureResource, ResponseMetadata]:
        client_request = self._request(ResourceType.STORED_PROCEDURES, request, "sprocs")
        client_request.body = json_body({"id": request.id, "body": request.body})
        body, metadata = await self.client.create_or_replace_resource(client_request, timeout)
        return decode_resource(StoredProcedureResource, body), metadata

    async def list_stored_procedures_raw(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        await self.client.list_resources(
            STORED_PROCEDURES_KEY,
            self._request(ResourceType.STORED_PROCEDURES, options, "sprocs"),
            fn,
            timeout,
        )

    async def list_stored_procedures(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        await self.list_stored_procedures_raw(
            typed_consumer(StoredProcedureResource, fn), options, timeout
        )

    def with_stored_procedure(self, id: str) -> StoredProcedureClient:
        return StoredProcedureClient(self.client, self.database_id, self.collection_id, id)

    # User-defined functions

    async def create_user_defined_function(
        self, request: CreateUserDefinedFunctionRequest, timeout: TimeoutTypes = None
    ) -> tuple[UserDefinedFunctionResource, ResponseMetadata]:
        client_request = self._request(ResourceType.USER_DEFINED_FUNCTIONS, request, "udfs")
        client_request.body = json_body({"id": request.id, "body": request.body})
        body, metadata = await self.client.create_or_replace_resource(client_request, timeout)
        return decode_resource(UserDefinedFunctionResource, body), metadata

    async def list_user_defined_functions_raw(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        await self.client.list_resources(
            USER_DEFINED_FUNCTIONS_KEY,
            self._request(ResourceType.USER_DEFINED_FUNCTIONS, options, "udfs"),
            fn,
            timeout,
        )

    async def list_user_defined_functions(
        self,
        fn: PageConsumer,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> None:
        await self.list_user_defined_functions_raw(
            typed_consumer(UserDefinedFunctionResource, fn), options, timeout
        )

    def with_user_defined_function(self, id: str) -> UserDefinedFunctionClient:
        return UserDefinedFunctionClient(
            self.client, self.database_id, self.collection_id, id
        )
