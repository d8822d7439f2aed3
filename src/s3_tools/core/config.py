"""Configuration management for s3-tools."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "s3-tools"

    # Connection defaults used by the CLI when no option is given
    endpoint_url: Optional[str] = None
    region_name: str = "us-east-1"
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    force_path_style: bool = False
    disable_ssl: bool = False

    multipart_threshold: int = 8 * 1024 * 1024

    model_config = {
        "env_prefix": "S3_TOOLS_",
        "case_sensitive": False,
    }


settings = Settings()
