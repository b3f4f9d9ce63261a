"""Emulator configuration using Pydantic Settings."""

import base64
import binascii

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Well-known key of the local development emulator.
DEFAULT_ACCOUNT_KEY = (
    "C2y6yDjf5/R+ob0N8A7Cgv30VRDJIWEHLM+4QDU5DE2nQ9nDuVTqobD4b8mGGyPMbIZnqyMsEcaGQy67XIw/Jw=="
)


class EmulatorConfig(BaseSettings):
    """Emulator configuration with environment variable support."""

    host: str = Field(default="127.0.0.1", description="Host to bind the emulator to")
    port: int = Field(default=8081, description="Port to bind the emulator to")

    # Authorization
    account_key: str = Field(
        default=DEFAULT_ACCOUNT_KEY, description="Base64 master key requests are signed with"
    )
    require_auth: bool = Field(
        default=True, description="Reject requests without a valid master-key signature"
    )
    max_clock_skew_seconds: int = Field(
        default=900,
        description="Maximum difference between x-ms-date and the emulator clock",
        ge=0,
    )

    # Feeds and offers
    default_max_item_count: int = Field(
        default=100, description="Page size when the request sets no x-ms-max-item-count", ge=1
    )
    default_offer_throughput: int = Field(
        default=400, description="Throughput of a new collection without offer headers", ge=400
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
        pattern="^(DEBUG|INFO|WARNING|ERROR)$",
    )
    log_format: str = Field(
        default="json",
        description="Log format (json or console)",
        pattern="^(json|console)$",
    )

    enable_docs: bool = Field(default=False, description="Serve the OpenAPI documentation")

    @field_validator("account_key")
    @classmethod
    def validate_account_key(cls, v: str) -> str:
        try:
            base64.b64decode(v, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"account_key is not valid base64: {e}") from e
        return v

    def key_bytes(self) -> bytes:
        return base64.b64decode(self.account_key)

    model_config = {
        "env_prefix": "EMULATOR_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


def get_config() -> EmulatorConfig:
    """Get emulator configuration instance."""
    return EmulatorConfig()
