"""
Asynchronous Python client for a document database REST API

Builds master-key signed requests against databases, collections, documents,
stored procedures, user-defined functions and offers, and walks paginated
list and query feeds by continuation token.
"""

from .auth import (
    Authorizer,
    ConnectionString,
    MasterKey,
    parse_connection_string,
    parse_master_key,
    sign,
    verify_authorization,
)
from .client import DocumentDBClient, create_client
from .config import ClientConfig, LoggingConfig, RetryConfig, TimeoutConfig
from .exceptions import (
    APIStatusError,
    APITimeoutError,
    ConfigurationError,
    DocDBError,
    KeyNotFoundError,
    PreconditionFailedError,
    ResourceNotFoundError,
    ResourceNotModifiedError,
    ResponseFormatError,
    TooManyRequestsError,
    TransportError,
    classify_response,
)
from .headers import ConsistencyLevel, IndexingDirective, OfferType, ResourceType
from .metadata import ResponseMetadata, get_response_metadata
from .models import (
    CollectionResource,
    DatabaseResource,
    DocumentProperties,
    IndexingPolicy,
    OfferContentV2,
    OfferResource,
    OfferVersion,
    PartitionKeyDefinition,
    StoredProcedureResource,
    UserDefinedFunctionResource,
)
from .options import (
    CommonRequestOptions,
    RequestOptions,
    RequestOptionsFunc,
    RequestOptionsList,
)
from .pagination import Page, Paginator
from .parsers import parse_array_from_response, parse_array_response, parse_object_response
from .query import Query, QueryParameter
from .request import ClientRequest, RequestBuilder
from .resources import (
    CollectionClient,
    CreateCollectionRequest,
    CreateDocumentRequest,
    CreateStoredProcedureRequest,
    CreateUserDefinedFunctionRequest,
    DatabaseClient,
    DocumentClient,
    OfferClient,
    ReplaceDocumentRequest,
    StoredProcedureClient,
    UserDefinedFunctionClient,
)
from .transport import HTTPXRequester, LoggingRequester, Requester, RetryAfterRequester

__all__ = [
    "DocumentDBClient",
    "create_client",
    "ClientConfig",
    "TimeoutConfig",
    "RetryConfig",
    "LoggingConfig",
    "Authorizer",
    "MasterKey",
    "ConnectionString",
    "parse_connection_string",
    "parse_master_key",
    "sign",
    "verify_authorization",
    "ClientRequest",
    "RequestBuilder",
    "RequestOptions",
    "RequestOptionsFunc",
    "RequestOptionsList",
    "CommonRequestOptions",
    "Query",
    "QueryParameter",
    "Page",
    "Paginator",
    "ResponseMetadata",
    "get_response_metadata",
    "parse_object_response",
    "parse_array_response",
    "parse_array_from_response",
    "Requester",
    "HTTPXRequester",
    "RetryAfterRequester",
    "LoggingRequester",
    "ResourceType",
    "ConsistencyLevel",
    "IndexingDirective",
    "OfferType",
    "DatabaseClient",
    "CollectionClient",
    "DocumentClient",
    "StoredProcedureClient",
    "UserDefinedFunctionClient",
    "OfferClient",
    "CreateCollectionRequest",
    "CreateDocumentRequest",
    "ReplaceDocumentRequest",
    "CreateStoredProcedureRequest",
    "CreateUserDefinedFunctionRequest",
    "DatabaseResource",
    "CollectionResource",
    "DocumentProperties",
    "IndexingPolicy",
    "PartitionKeyDefinition",
    "StoredProcedureResource",
    "UserDefinedFunctionResource",
    "OfferResource",
    "OfferVersion",
    "OfferContentV2",
    "DocDBError",
    "TransportError",
    "APITimeoutError",
    "APIStatusError",
    "PreconditionFailedError",
    "ResourceNotFoundError",
    "ResourceNotModifiedError",
    "TooManyRequestsError",
    "ResponseFormatError",
    "KeyNotFoundError",
    "ConfigurationError",
    "classify_response",
]

__version__ = "0.1.0"
