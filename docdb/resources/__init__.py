"""Resource-scoped wrappers built on the core client operations."""

from .collection import CollectionClient, CreateDocumentRequest
from .database import CreateCollectionRequest, DatabaseClient
from .document import DocumentClient, ReplaceDocumentRequest
from .offer import OfferClient
from .scripts import (
    CreateStoredProcedureRequest,
    CreateUserDefinedFunctionRequest,
    StoredProcedureClient,
    UserDefinedFunctionClient,
)

__all__ = [
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
]
