"""Tests for client configuration."""

import httpx
import pytest
from pydantic import ValidationError

from docdb import ClientConfig, ConfigurationError, MasterKey, RetryConfig, TimeoutConfig
from docdb.headers import DEFAULT_API_VERSION, DEFAULT_USER_AGENT

from .conftest import ENDPOINT, TEST_KEY, TEST_KEY_B64


class TestClientConfig:
    """Test ClientConfig."""

    def test_defaults(self):
        config = ClientConfig(endpoint=ENDPOINT)

        assert config.account_key is None
        assert config.api_version == DEFAULT_API_VERSION
        assert config.user_agent == DEFAULT_USER_AGENT
        assert config.retry.max_attempts == 3
        assert config.retry.status_codes == frozenset({429})
        assert config.logging.logger_name == "docdb"
        assert config.follow_redirects is True
        assert config.verify_ssl is True

    def test_from_connection_string(self):
        config = ClientConfig.from_connection_string(
            f"AccountEndpoint={ENDPOINT}:443/;AccountKey={TEST_KEY_B64};",
            timeout=TimeoutConfig(read=5.0),
        )

        assert config.endpoint == f"{ENDPOINT}:443/"
        assert config.account_key.get_secret_value() == TEST_KEY_B64
        assert config.timeout.read == 5.0

    def test_connection_string_with_bad_key(self):
        with pytest.raises(ConfigurationError, match="invalid master key"):
            ClientConfig.from_connection_string(f"AccountEndpoint={ENDPOINT};AccountKey=not base64!;")

    def test_key_is_hidden(self):
        config = ClientConfig(endpoint=ENDPOINT, account_key=TEST_KEY_B64)
        assert TEST_KEY_B64 not in repr(config)

    def test_frozen(self):
        config = ClientConfig(endpoint=ENDPOINT)
        with pytest.raises(ValidationError):
            config.api_version = "2018-12-31"

    def test_unknown_fields_rejected(self):
        with pytest.raises(ValidationError):
            ClientConfig(endpoint=ENDPOINT, api_key="x")

    def test_master_key(self):
        config = ClientConfig(endpoint=ENDPOINT, account_key=TEST_KEY_B64, api_version="2018-12-31")
        key = config.master_key()

        assert key == MasterKey(TEST_KEY)
        assert key.api_version == "2018-12-31"

    def test_master_key_without_account_key(self):
        assert not ClientConfig(endpoint=ENDPOINT).master_key()
        assert not ClientConfig(endpoint=ENDPOINT, account_key="").master_key()


class TestSubConfigs:
    def test_timeout_conversion(self):
        timeout = TimeoutConfig(connect=1.0, read=2.0, write=3.0, pool=4.0).to_httpx_timeout()
        assert timeout == httpx.Timeout(connect=1.0, read=2.0, write=3.0, pool=4.0)

    def test_retry_requires_an_attempt(self):
        with pytest.raises(ValidationError):
            RetryConfig(max_attempts=0)
