"""Single-document operations."""

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx

from ..headers import (
    HEADER_IF_MATCH,
    HEADER_INDEXING_DIRECTIVE,
    HEADER_PARTITION_KEY,
    IndexingDirective,
    ResourceType,
)
from ..metadata import ResponseMetadata
from ..models import DocumentProperties, ModelT, decode_resource
from ..options import RequestOptions, RequestOptionsFunc, chain_options
from ..request import ClientRequest, TimeoutTypes, resource_link, resource_path
from .base import ResourceClient, document_or_body


def partition_key_header(values: list[Any]) -> str:
    """The partition key header is a JSON array of the key values."""
    return json.dumps(values, separators=(",", ":"))


@dataclass
class ReplaceDocumentRequest:
    """
    Parameters for replacing a document.

    When ``etag`` is set the replace only succeeds if the stored document
    still has that ETag; otherwise PreconditionFailedError is raised.
    """

    document: Any = None
    body: Optional[bytes] = None
    etag: str = ""
    indexing_directive: Union[IndexingDirective, str, None] = None
    options: Optional[RequestOptions] = None

    def to_json(self) -> bytes:
        return document_or_body(self, "ReplaceDocumentRequest")

    def apply_options(self, request: httpx.Request) -> None:
        if self.etag:
            request.headers[HEADER_IF_MATCH] = self.etag
        if self.indexing_directive:
            request.headers[HEADER_INDEXING_DIRECTIVE] = IndexingDirective(
                self.indexing_directive
            ).value
        if self.options is not None:
            self.options.apply_options(request)


class DocumentClient(ResourceClient):
    """Client scoped to a single document; the partition key is sent on every call."""

    def __init__(
        self,
        client,
        database_id: str,
        collection_id: str,
        document_id: str,
        partition_key: Optional[list[Any]] = None,
    ):
        super().__init__(client)
        self.database_id = database_id
        self.collection_id = collection_id
        self.document_id = document_id
        self.partition_key = partition_key

    @property
    def resource_link(self) -> str:
        return resource_link(
            "dbs", self.database_id, "colls", self.collection_id, "docs", self.document_id
        )

    @property
    def path(self) -> str:
        return resource_path(
            "dbs", self.database_id, "colls", self.collection_id, "docs", self.document_id
        )

    def _with_partition_key(self, options: Optional[RequestOptions]) -> Optional[RequestOptions]:
        if not self.partition_key:
            return options
        header = partition_key_header(self.partition_key)

        def set_partition_key(request: httpx.Request) -> None:
            request.headers[HEADER_PARTITION_KEY] = header

        return chain_options(options, RequestOptionsFunc(set_partition_key))

    def _request(self, options: Optional[RequestOptions]) -> ClientRequest:
        return ClientRequest(
            path=self.path,
            resource_type=ResourceType.DOCUMENTS,
            resource_link=self.resource_link,
            options=self._with_partition_key(options),
        )

    async def get_raw(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[bytes, ResponseMetadata]:
        return await self.client.get_resource(self._request(options), timeout)

    async def get(
        self,
        options: Optional[RequestOptions] = None,
        model: type[ModelT] = DocumentProperties,  # type: ignore[assignment]
        timeout: TimeoutTypes = None,
    ) -> tuple[ModelT, ResponseMetadata]:
        """Read the document and decode it into ``model``."""
        body, metadata = await self.get_raw(options, timeout)
        return decode_resource(model, body), metadata

    async def replace_raw(
        self, request: ReplaceDocumentRequest, timeout: TimeoutTypes = None
    ) -> tuple[bytes, ResponseMetadata]:
        client_request = self._request(request)
        client_request.method = "PUT"
        client_request.body = request.to_json()
        return await self.client.create_or_replace_resource(client_request, timeout)

    async def replace(
        self,
        request: ReplaceDocumentRequest,
        model: type[ModelT] = DocumentProperties,  # type: ignore[assignment]
        timeout: TimeoutTypes = None,
    ) -> tuple[ModelT, ResponseMetadata]:
        body, metadata = await self.replace_raw(request, timeout)
        return decode_resource(model, body), metadata

    async def delete(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[bool, ResponseMetadata]:
        return await self.client.delete_resource(self._request(options), timeout)
