"""
Configuration system for the document database client.

Provides Pydantic-based configuration with sensible defaults for the
endpoint, the account key, timeouts, throttling retries and logging. The
configuration is frozen: the API version, endpoint and key are read-only
once a client has been built from it.
"""

from typing import Any, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from .auth import MasterKey, parse_master_key, split_connection_string
from .headers import DEFAULT_API_VERSION, DEFAULT_USER_AGENT


class TimeoutConfig(BaseModel):
    """HTTP timeout configuration."""

    connect: float = Field(default=10.0, description="Connection timeout in seconds")
    read: float = Field(default=30.0, description="Read timeout in seconds")
    write: float = Field(default=30.0, description="Write timeout in seconds")
    pool: float = Field(default=5.0, description="Pool timeout in seconds")

    model_config = ConfigDict(frozen=True)

    def to_httpx_timeout(self) -> httpx.Timeout:
        """Convert to httpx.Timeout object."""
        return httpx.Timeout(
            connect=self.connect, read=self.read, write=self.write, pool=self.pool
        )


class RetryConfig(BaseModel):
    """Throttling retry configuration used by RetryAfterRequester."""

    max_attempts: int = Field(default=3, ge=1, description="Maximum send attempts")
    min_wait_seconds: float = Field(
        default=0.1, description="Minimum backoff when the server gives no hint"
    )
    max_wait_seconds: float = Field(
        default=30.0, description="Upper bound for any single wait"
    )
    multiplier: float = Field(default=2.0, description="Exponential backoff multiplier")
    status_codes: frozenset[int] = Field(
        default=frozenset({429}), description="Statuses that trigger a retry"
    )

    model_config = ConfigDict(frozen=True)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)"
    )
    logger_name: str = Field(default="docdb", description="Logger name")
    log_requests: bool = Field(
        default=False, description="Dump every request and response at DEBUG level"
    )
    log_bodies: bool = Field(
        default=False, description="Include request bodies in debug request logs"
    )

    model_config = ConfigDict(frozen=True)


class ClientConfig(BaseModel):
    """
    Complete configuration for the document database client.

    **Building from a connection string:**

    ```python
    config = ClientConfig.from_connection_string(
        "AccountEndpoint=https://myaccount.documents.azure.com:443/;"
        "AccountKey=dGVzdGtleQ==;",
        timeout=TimeoutConfig(read=5.0),
    )
    ```

    **Local emulator with throttling retries turned up:**

    ```python
    config = ClientConfig(
        endpoint="http://localhost:8081",
        account_key=EMULATOR_KEY,
        retry=RetryConfig(max_attempts=6, max_wait_seconds=5.0),
        verify_ssl=False,
    )
    ```

    Attributes:
        endpoint: Account endpoint all resource paths are joined to
        account_key: Base64 master key; None or empty disables signing
        api_version: Value sent in ``x-ms-version`` unless a request overrides it
        user_agent: Value sent in ``User-Agent``
        timeout: Default per-request timeout, attached to every request
        retry: Throttling retry behavior of the default transport stack
        logging: Logger name and level
        follow_redirects: Whether to automatically follow HTTP redirects
        verify_ssl: Whether to verify SSL certificates (disable only for testing)
    """

    endpoint: str = Field(description="Account endpoint URL")
    account_key: Optional[SecretStr] = Field(
        default=None, description="Base64-encoded master key"
    )
    api_version: str = Field(default=DEFAULT_API_VERSION, description="REST API version")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header")
    timeout: TimeoutConfig = Field(default_factory=TimeoutConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_connection_string(cls, connection_string: str, **overrides: Any) -> "ClientConfig":
        """
        Build a configuration from an ``AccountEndpoint=...;AccountKey=...;`` string.

        The key is validated eagerly so a malformed value fails here rather
        than on the first request.
        """
        fields = split_connection_string(connection_string)
        key_text = fields.get("AccountKey", "")
        if key_text:
            parse_master_key(key_text)
        values: dict[str, Any] = {"endpoint": fields.get("AccountEndpoint", "")}
        if key_text:
            values["account_key"] = SecretStr(key_text)
        values.update(overrides)
        return cls(**values)

    def master_key(self) -> MasterKey:
        """Decode the account key; an absent key yields a pass-through MasterKey."""
        if self.account_key is None or not self.account_key.get_secret_value():
            return MasterKey(b"", api_version=self.api_version)
        key = parse_master_key(self.account_key.get_secret_value())
        key.api_version = self.api_version
        return key
