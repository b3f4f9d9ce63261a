"""Stored procedures and user-defined functions."""

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..headers import ResourceType
from ..metadata import ResponseMetadata
from ..models import StoredProcedureResource, UserDefinedFunctionResource, decode_resource
from ..options import RequestOptions
from ..request import ClientRequest, TimeoutTypes, resource_link, resource_path
from .base import ResourceClient, json_body


@dataclass
class CreateStoredProcedureRequest:
    """A stored procedure: its id and JavaScript body."""

    id: str
    body: str
    options: Optional[RequestOptions] = None

    def apply_options(self, request: httpx.Request) -> None:
        if self.options is not None:
            self.options.apply_options(request)


@dataclass
class CreateUserDefinedFunctionRequest:
    """A user-defined function: its id and JavaScript body."""

    id: str
    body: str
    options: Optional[RequestOptions] = None

    def apply_options(self, request: httpx.Request) -> None:
        if self.options is not None:
            self.options.apply_options(request)


class _ScriptClient(ResourceClient):
    feed = ""
    resource_type = ResourceType.STORED_PROCEDURES

    def __init__(self, client, database_id: str, collection_id: str, script_id: str):
        super().__init__(client)
        self.database_id = database_id
        self.collection_id = collection_id
        self.script_id = script_id

    @property
    def resource_link(self) -> str:
        return resource_link(
            "dbs", self.database_id, "colls", self.collection_id, self.feed, self.script_id
        )

    @property
    def path(self) -> str:
        return resource_path(
            "dbs", self.database_id, "colls", self.collection_id, self.feed, self.script_id
        )

    def _request(
        self, options: Optional[RequestOptions], method: str = "", body: Optional[bytes] = None
    ) -> ClientRequest:
        return ClientRequest(
            method=method,
            path=self.path,
            resource_type=self.resource_type,
            resource_link=self.resource_link,
            options=options,
            body=body,
        )

    async def _replace(
        self, body: str, options: Optional[RequestOptions], timeout: TimeoutTypes
    ) -> tuple[bytes, ResponseMetadata]:
        payload = json_body({"id": self.script_id, "body": body})
        return await self.client.create_or_replace_resource(
            self._request(options, "PUT", payload), timeout
        )

    async def delete(
        self, options: Optional[RequestOptions] = None, timeout: TimeoutTypes = None
    ) -> tuple[bool, ResponseMetadata]:
        return await self.client.delete_resource(self._request(options), timeout)


class StoredProcedureClient(_ScriptClient):
    """Client scoped to a single stored procedure."""

    feed = "sprocs"
    resource_type = ResourceType.STORED_PROCEDURES

    async def replace(
        self,
        body: str,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> tuple[StoredProcedureResource, ResponseMetadata]:
        """Replace the JavaScript body of the procedure."""
        data, metadata = await self._replace(body, options, timeout)
        return decode_resource(StoredProcedureResource, data), metadata

    async def execute(
        self,
        *args: Any,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> tuple[bytes, ResponseMetadata]:
        """
        Run the procedure with ``args`` serialized as a JSON array.

        Returns the raw result body.
        """
        return await self.client.create_or_replace_resource(
            self._request(options, "POST", json_body(list(args))), timeout
        )


class UserDefinedFunctionClient(_ScriptClient):
    """Client scoped to a single user-defined function."""

    feed = "udfs"
    resource_type = ResourceType.USER_DEFINED_FUNCTIONS

    async def replace(
        self,
        body: str,
        options: Optional[RequestOptions] = None,
        timeout: TimeoutTypes = None,
    ) -> tuple[UserDefinedFunctionResource, ResponseMetadata]:
        data, metadata = await self._replace(body, options, timeout)
        return decode_resource(UserDefinedFunctionResource, data), metadata
