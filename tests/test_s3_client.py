"""Tests for S3 client configuration and session management."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from s3_tools.core.exceptions import ConfigurationError, ValidationError
from s3_tools.objectstorage import S3ClientConfig, S3ClientManager, create_client


class TestS3ClientConfig:
    """Test S3 client configuration."""

    def test_defaults(self):
        """Test configuration defaults."""
        config = S3ClientConfig()
        assert config.endpoint_url is None
        assert config.region_name == "us-east-1"
        assert config.force_path_style is False
        assert config.disable_ssl is False

    def test_config_is_immutable(self):
        """Test configuration cannot be changed after construction."""
        config = S3ClientConfig(region_name="eu-west-1")
        with pytest.raises(PydanticValidationError):
            config.region_name = "us-west-2"

    def test_unknown_option_rejected(self):
        """Test unknown options raise ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Invalid S3 configuration"):
            S3ClientManager.build_config(region_name="us-east-1", bucket="nope")


class TestS3ClientManager:
    """Test session and client construction."""

    def test_path_style_addressing(self):
        """Test force_path_style selects path addressing."""
        manager = S3ClientManager(
            S3ClientConfig(
                endpoint_url="http://localhost:9000",
                access_key_id="minioadmin",
                secret_access_key="minioadmin",
                force_path_style=True,
            )
        )

        client = manager.client()
        assert client.meta.config.s3 == {"addressing_style": "path"}
        assert client.meta.endpoint_url == "http://localhost:9000"

    def test_disable_ssl(self):
        """Test disable_ssl builds a plain HTTP endpoint."""
        manager = S3ClientManager(S3ClientConfig(disable_ssl=True))

        assert manager.client().meta.endpoint_url.startswith("http://")

    def test_default_client_is_shared(self):
        """Test calls without a retry override share one client."""
        manager = S3ClientManager(S3ClientConfig())

        assert manager.client() is manager.client()

    def test_retry_override_builds_separate_client(self):
        """Test a retry override does not touch the shared client."""
        manager = S3ClientManager(S3ClientConfig())

        retrying = manager.client(retry_count=3)

        assert retrying is not manager.client()
        assert retrying.meta.config.retries["total_max_attempts"] == 4

    def test_negative_retry_count(self):
        """Test a negative retry count is rejected."""
        manager = S3ClientManager(S3ClientConfig())

        with pytest.raises(ValidationError, match="retry_count"):
            manager.client(retry_count=-1)

    def test_invalid_region(self):
        """Test a malformed region raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Failed to create S3 session"):
            create_client(region_name="not a region!")

    def test_invalid_endpoint(self):
        """Test a malformed endpoint URL raises ConfigurationError."""
        with pytest.raises(ConfigurationError):
            create_client(endpoint_url="not a url")


class TestParseS3Path:
    """Test s3:// path parsing."""

    def test_bucket_and_key(self):
        """Test a full object path."""
        assert S3ClientManager.parse_s3_path("s3://bucket/a/b.txt") == (
            "bucket",
            "a/b.txt",
        )

    def test_bucket_only(self):
        """Test a bare bucket path."""
        assert S3ClientManager.parse_s3_path("s3://bucket") == ("bucket", "")

    def test_missing_scheme(self):
        """Test paths without s3:// are rejected."""
        with pytest.raises(ValidationError, match="must start with 's3://'"):
            S3ClientManager.parse_s3_path("bucket/key")

    def test_missing_bucket(self):
        """Test paths without a bucket are rejected."""
        with pytest.raises(ValidationError, match="missing bucket"):
            S3ClientManager.parse_s3_path("s3:///key")
