"""
Header names, content types and enumerations shared by the whole library.

Every value here is read-only. The API version and user agent are not
module state; they live on the frozen ClientConfig.
"""

from enum import Enum

DEFAULT_API_VERSION = "2017-02-22"
DEFAULT_USER_AGENT = "DocDB-Python/0.1"

# Master-key token identifiers
MASTER_TOKEN_AUTH_TYPE = "master"
TOKEN_VERSION = "1.0"

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_QUERY_JSON = "application/query+json"

# Request headers
HEADER_AUTHORIZATION = "Authorization"
HEADER_USER_AGENT = "User-Agent"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_IF_MATCH = "If-Match"
HEADER_IF_NONE_MATCH = "If-None-Match"
HEADER_IF_MODIFIED_SINCE = "If-Modified-Since"
HEADER_MS_DATE = "x-ms-date"
HEADER_MS_VERSION = "x-ms-version"
HEADER_ACTIVITY_ID = "x-ms-activity-id"
HEADER_CONSISTENCY_LEVEL = "x-ms-consistency-level"
HEADER_MAX_ITEM_COUNT = "x-ms-max-item-count"
HEADER_PARTITION_KEY = "x-ms-documentdb-partitionkey"
HEADER_PARTITION_KEY_RANGE_ID = "x-ms-documentdb-partitionkeyrangeid"
HEADER_ENABLE_CROSS_PARTITION = "x-ms-documentdb-query-enablecrosspartition"
HEADER_IS_QUERY = "x-ms-documentdb-isquery"
HEADER_IS_UPSERT = "x-ms-documentdb-is-upsert"
HEADER_INDEXING_DIRECTIVE = "x-ms-indexing-directive"
HEADER_OFFER_TYPE = "x-ms-offer-type"
HEADER_OFFER_THROUGHPUT = "x-ms-offer-throughput"
HEADER_A_IM = "A-IM"

# Response headers (continuation and session token travel both ways)
HEADER_DATE = "Date"
HEADER_ETAG = "ETag"
HEADER_ALT_CONTENT_PATH = "x-ms-alt-content-path"
HEADER_CONTINUATION = "x-ms-continuation"
HEADER_ITEM_COUNT = "x-ms-item-count"
HEADER_REQUEST_CHARGE = "x-ms-request-charge"
HEADER_RESOURCE_QUOTA = "x-ms-resource-quota"
HEADER_RESOURCE_USAGE = "x-ms-resource-usage"
HEADER_RETRY_AFTER_MS = "x-ms-retry-after-ms"
HEADER_SCHEMA_VERSION = "x-ms-schemaversion"
HEADER_SERVICE_VERSION = "x-ms-serviceversion"
HEADER_SESSION_TOKEN = "x-ms-session-token"


class ResourceType(str, Enum):
    """Resource type names as they appear in signatures and URL paths."""

    DATABASES = "dbs"
    COLLECTIONS = "colls"
    DOCUMENTS = "docs"
    ATTACHMENTS = "attachments"
    STORED_PROCEDURES = "sprocs"
    USER_DEFINED_FUNCTIONS = "udfs"
    TRIGGERS = "triggers"
    USERS = "users"
    PERMISSIONS = "permissions"
    OFFERS = "offers"

    def __str__(self) -> str:
        return self.value.lower()


class ConsistencyLevel(str, Enum):
    """Consistency level override, strongest first."""

    STRONG = "Strong"
    BOUNDED = "Bounded"
    SESSION = "Session"
    EVENTUAL = "Eventual"


class IndexingDirective(str, Enum):
    INCLUDE = "Include"
    EXCLUDE = "Exclude"


class OfferType(str, Enum):
    """Pre-defined performance levels. INVALID means user-defined throughput."""

    INVALID = "Invalid"
    S1 = "S1"
    S2 = "S2"
    S3 = "S3"
