"""
SQL-like queries and their named parameters.

Only the query text and the parameters travel in the request body. The
pagination controls are sent as headers through ``apply_options``.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import httpx

from .headers import (
    HEADER_CONSISTENCY_LEVEL,
    HEADER_CONTINUATION,
    HEADER_ENABLE_CROSS_PARTITION,
    HEADER_MAX_ITEM_COUNT,
    HEADER_SESSION_TOKEN,
    ConsistencyLevel,
)
from .options import RequestOptions

SENSITIVE_PLACEHOLDER = "!(sensitive)"


@dataclass
class QueryParameter:
    """
    A named query parameter.

    Names should begin with ``@``. ``sensitive`` only hides the value in
    ``str()``; the value is always serialized into the request body.
    """

    name: str
    value: Any
    sensitive: bool = False

    def __str__(self) -> str:
        if self.sensitive:
            return f"{self.name}: {SENSITIVE_PLACEHOLDER}"
        return f"{self.name}: {json.dumps(self.value, default=repr)}"

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass
class Query:
    """
    A query with parameters and pagination controls.

    ```python
    query = Query("SELECT * FROM c WHERE c.id = @id AND c.secret = @secret")
    query.add_parameter("@id", "123")
    query.add_sensitive_parameter("@secret", "hunter2")
    str(query)  # 'SELECT ...; [@id: "123", @secret: !(sensitive)]'
    ```
    """

    query: str
    parameters: list[QueryParameter] = field(default_factory=list)
    max_item_count: int = 0
    continuation: str = ""
    enable_cross_partition: bool = False
    consistency_level: Union[ConsistencyLevel, str, None] = None
    session_token: str = ""
    request_options: Optional[RequestOptions] = None

    def add_parameter(self, name: str, value: Any) -> "Query":
        self.parameters.append(QueryParameter(name, value))
        return self

    def add_sensitive_parameter(self, name: str, value: Any) -> "Query":
        self.parameters.append(QueryParameter(name, value, sensitive=True))
        return self

    def __str__(self) -> str:
        text = f"{self.query};"
        if self.parameters:
            text += " [" + ", ".join(str(p) for p in self.parameters) + "]"
        return text

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"query": self.query}
        if self.parameters:
            body["parameters"] = [p.to_dict() for p in self.parameters]
        return body

    def to_json(self) -> bytes:
        """Serialize the request body; parameters are omitted when empty."""
        return json.dumps(self.to_dict(), separators=(",", ":")).encode("utf-8")

    def apply_options(self, request: httpx.Request) -> None:
        headers = request.headers
        if self.session_token:
            headers[HEADER_SESSION_TOKEN] = self.session_token
        if self.consistency_level:
            headers[HEADER_CONSISTENCY_LEVEL] = ConsistencyLevel(self.consistency_level).value
        if self.enable_cross_partition:
            headers[HEADER_ENABLE_CROSS_PARTITION] = "true"
        if self.continuation:
            headers[HEADER_CONTINUATION] = self.continuation
        if self.max_item_count:
            headers[HEADER_MAX_ITEM_COUNT] = str(self.max_item_count)
        if self.request_options is not None:
            self.request_options.apply_options(request)
