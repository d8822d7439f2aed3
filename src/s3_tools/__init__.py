"""A thin client for S3-compatible object storage.

This package wraps boto3 behind a single session-bound client offering the
object store primitives most services need: uploading files, byte payloads
and whole directory trees, downloading to memory, to an open file or to a
local path, probing for existence and metadata, and listing keys by prefix.

Recommended Usage:
    >>> from s3_tools import create_client
    >>> client = create_client(
    ...     endpoint_url="http://localhost:9000",
    ...     access_key_id="minioadmin",
    ...     secret_access_key="minioadmin",
    ...     force_path_style=True,
    ... )
    >>> keys = client.upload_directory("./build", "artifacts", "releases/1.0")
    >>> client.object_exists("artifacts", "releases/1.0/index.html")
    True

Errors:
    All failures are raised as subclasses of ``S3ToolsError``; only a missing
    object is turned into ``False`` by ``object_exists``.
"""

__version__ = "0.1.0"

from .core.exceptions import (
    ConfigurationError,
    LocalIOError,
    ObjectNotFoundError,
    S3ToolsError,
    TransportError,
    ValidationError,
)
from .objectstorage import (
    ObjectMetadata,
    ObjectStoreClient,
    S3ClientConfig,
    UploadResult,
    create_client,
)

__all__ = [
    # Client
    "ObjectStoreClient",
    "S3ClientConfig",
    "create_client",
    # Results
    "ObjectMetadata",
    "UploadResult",
    # Errors
    "S3ToolsError",
    "ValidationError",
    "ConfigurationError",
    "LocalIOError",
    "TransportError",
    "ObjectNotFoundError",
]
