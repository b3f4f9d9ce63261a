"""
Master-key request signing.

Every request carries an ``Authorization`` token computed as an HMAC-SHA256
over a newline-joined string of the lower-cased verb, the lower-cased
resource type, the case-sensitive resource link and the lower-cased
RFC 1123 date, followed by two empty fields:

```
get\\ndocs\\ndbs/db1/colls/col1\\nthu, 01 jan 1970 00:00:00 gmt\\n\\n
```

The HMAC is keyed with the base64-decoded master key and the digest is
base64 encoded. The date used for signing is the one sent in ``x-ms-date``.
"""

import base64
import binascii
import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Callable, Optional, Protocol, Union
from urllib.parse import quote_plus, unquote_plus

import httpx

from .exceptions import ConfigurationError
from .headers import (
    DEFAULT_API_VERSION,
    HEADER_AUTHORIZATION,
    HEADER_MS_DATE,
    HEADER_MS_VERSION,
    MASTER_TOKEN_AUTH_TYPE,
    TOKEN_VERSION,
    ResourceType,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_http_date(value: datetime) -> str:
    """Format a datetime as an RFC 1123 date in GMT."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def _resource_type_name(resource_type: Union[ResourceType, str]) -> str:
    if isinstance(resource_type, ResourceType):
        return resource_type.value
    return str(resource_type)


def string_to_sign(
    method: str,
    resource_type: Union[ResourceType, str],
    resource_link: str,
    date: str,
) -> str:
    """Build the newline-joined payload the signature is computed over."""
    return "\n".join(
        [
            method.lower(),
            _resource_type_name(resource_type).lower(),
            resource_link,  # case sensitive
            date.lower(),
            "",
            "",
        ]
    )


def sign(
    method: str,
    resource_type: Union[ResourceType, str],
    resource_link: str,
    date: str,
    key: bytes,
) -> str:
    """
    Compute the base64 HMAC-SHA256 signature for one request.

    Args:
        method: HTTP verb, any case
        resource_type: Resource type such as ``docs`` or ``colls``
        resource_link: Case-sensitive resource identity, e.g. ``dbs/db1/colls/col1``
        date: RFC 1123 date exactly as sent in ``x-ms-date``
        key: Raw (already base64-decoded) master key

    Returns:
        Base64-encoded signature
    """
    return MasterKey(key).sign(string_to_sign(method, resource_type, resource_link, date))


def authorization_token(signature: str) -> str:
    """Wrap a signature into the percent-encoded master token."""
    return quote_plus(
        f"type={MASTER_TOKEN_AUTH_TYPE}&ver={TOKEN_VERSION}&sig={signature}"
    )


class Authorizer(Protocol):
    """Capability that authorizes an outgoing request before it is sent."""

    def authorize(
        self,
        request: httpx.Request,
        resource_type: ResourceType,
        resource_link: str,
    ) -> httpx.Request:
        ...


class MasterKey:
    """
    Shared account key that signs requests.

    An empty key authorizes nothing: requests pass through unmodified, which
    lets an external authorizer handle authentication entirely.

    Attributes:
        key: Raw key bytes
        api_version: Value for ``x-ms-version`` when the request has none
        clock: Returns the current UTC time used for ``x-ms-date``
    """

    def __init__(
        self,
        key: bytes,
        api_version: str = DEFAULT_API_VERSION,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.key = key
        self.api_version = api_version
        self.clock = clock

    def __bool__(self) -> bool:
        return bool(self.key)

    def __repr__(self) -> str:
        return f"MasterKey(<{len(self.key)} bytes>)"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MasterKey):
            return NotImplemented
        return hmac.compare_digest(self.key, other.key)

    def __hash__(self) -> int:
        return hash(self.key)

    def sign(self, message: str) -> str:
        """HMAC-SHA256 the message with this key, base64 encoded."""
        digest = hmac.new(self.key, message.encode("utf-8"), hashlib.sha256).digest()
        return base64.b64encode(digest).decode("ascii")

    def authorize(
        self,
        request: httpx.Request,
        resource_type: ResourceType,
        resource_link: str,
    ) -> httpx.Request:
        """
        Set the ``Authorization``, ``x-ms-date`` and ``x-ms-version`` headers.

        The version header is only set when the request does not carry one
        already, so callers can override it.
        """
        if not self.key:
            return request

        date = format_http_date(self.clock())
        signature = self.sign(string_to_sign(request.method, resource_type, resource_link, date))
        request.headers[HEADER_AUTHORIZATION] = authorization_token(signature)
        if not request.headers.get(HEADER_MS_VERSION):
            request.headers[HEADER_MS_VERSION] = self.api_version
        request.headers[HEADER_MS_DATE] = date
        return request


def parse_master_key(key: str) -> MasterKey:
    """Decode a base64 account key."""
    try:
        return MasterKey(base64.b64decode(key, validate=True))
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError(f"invalid master key: {e}") from e


@dataclass(frozen=True)
class ConnectionString:
    """Endpoint and key parsed from an account connection string."""

    endpoint: str
    account_key: MasterKey


def parse_connection_string(connection_string: str) -> ConnectionString:
    """
    Parse an account connection string.

    The expected format is::

        AccountEndpoint=https://accountname.documents.azure.com:443/;AccountKey=BASE64KEY;

    Unknown components are ignored.
    """
    fields = split_connection_string(connection_string)
    key = fields.get("AccountKey", "")
    return ConnectionString(
        endpoint=fields.get("AccountEndpoint", ""),
        account_key=parse_master_key(key) if key else MasterKey(b""),
    )


def split_connection_string(connection_string: str) -> dict[str, str]:
    """Split ``name=value;`` components; empty and malformed components are skipped."""
    fields: dict[str, str] = {}
    for component in connection_string.split(";"):
        name, sep, value = component.partition("=")
        if sep and name:
            fields[name.strip()] = value.strip()
    return fields


@dataclass(frozen=True)
class AuthorizationToken:
    auth_type: str
    version: str
    signature: str


def parse_authorization_token(header: str) -> Optional[AuthorizationToken]:
    """Decode a percent-encoded ``type=..&ver=..&sig=..`` token."""
    # the signature is base64, so "+" must survive a second decode
    fields = dict(part.partition("=")[::2] for part in unquote_plus(header).split("&"))
    try:
        return AuthorizationToken(
            auth_type=fields["type"],
            version=fields["ver"],
            signature=fields["sig"],
        )
    except KeyError:
        return None


def verify_authorization(
    header: str,
    method: str,
    resource_type: Union[ResourceType, str],
    resource_link: str,
    date: str,
    key: bytes,
) -> bool:
    """Check an ``Authorization`` header against the expected master signature."""
    token = parse_authorization_token(header)
    if token is None or token.auth_type != MASTER_TOKEN_AUTH_TYPE:
        return False
    expected = sign(method, resource_type, resource_link, date, key)
    return hmac.compare_digest(token.signature, expected)
