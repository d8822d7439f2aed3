"""Object storage operations for S3-compatible services."""

from .clients import S3ClientConfig, S3ClientManager
from .s3_operations import (
    ObjectMetadata,
    ObjectStoreClient,
    UploadResult,
    create_client,
)

__all__ = [
    "ObjectMetadata",
    "ObjectStoreClient",
    "S3ClientConfig",
    "S3ClientManager",
    "UploadResult",
    "create_client",
]
