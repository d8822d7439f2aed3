"""Object store operations bound to a single S3 session.

``ObjectStoreClient`` is a thin layer over boto3: each method builds the
request, calls the matching SDK operation and hands back the result. The only
policy it adds is the not-found normalization in ``object_exists``; every
other failure surfaces as one of the exceptions in ``s3_tools.core.exceptions``
with the SDK error chained as ``__cause__``.

Directory uploads traverse the whole tree first and only then upload the
collected files one after another, so a file that cannot be listed or opened
is reported before any object has been written.
"""

import io
import os
import posixpath
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import IO, Any, Callable, Iterator, Optional

from boto3.exceptions import Boto3Error
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError
from s3transfer.exceptions import RetriesExceededError

from s3_tools.core import get_logger, get_tracer, settings
from s3_tools.core.exceptions import (
    LocalIOError,
    ObjectNotFoundError,
    TransportError,
)
from s3_tools.objectstorage.clients import S3ClientConfig, S3ClientManager

logger = get_logger(__name__)
tracer = get_tracer(__name__)

# HEAD reports a missing key as "404"/"NotFound", GET as "NoSuchKey"
NOT_FOUND_CODES = frozenset({"404", "NotFound", "NoSuchKey"})

_TRANSPORT_ERRORS = (ClientError, BotoCoreError, Boto3Error, RetriesExceededError)

PageCallback = Callable[[dict[str, Any], bool], bool]


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a single object upload."""

    bucket: str
    key: str
    bytes_uploaded: int


@dataclass(frozen=True)
class ObjectMetadata:
    """Object metadata returned by a HEAD request."""

    bucket: str
    key: str
    size_bytes: int
    content_type: Optional[str]
    last_modified: Optional[datetime]
    etag: Optional[str]
    version_id: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)


class _TransferProgress:
    """Running byte total fed by boto3 transfer callbacks.

    Callbacks arrive from the transfer manager's worker threads.
    """

    def __init__(self) -> None:
        self.bytes_transferred = 0
        self._lock = threading.Lock()

    def __call__(self, bytes_amount: int) -> None:
        with self._lock:
            self.bytes_transferred += bytes_amount


def _remaining_bytes(fileobj: IO[bytes]) -> Optional[int]:
    """Bytes between the current position and the end, or None if unseekable."""
    try:
        if not fileobj.seekable():
            return None
        start = fileobj.tell()
        end = fileobj.seek(0, os.SEEK_END)
        fileobj.seek(start)
    except (AttributeError, OSError):
        return None
    return end - start


def _transport_error(message: str, exc: Exception) -> TransportError:
    """Wrap an SDK failure, mapping not-found codes to ``ObjectNotFoundError``."""
    code = None
    if isinstance(exc, ClientError):
        code = exc.response.get("Error", {}).get("Code")

    error_cls = ObjectNotFoundError if code in NOT_FOUND_CODES else TransportError
    return error_cls(f"{message}: {exc}", code=code)


class ObjectStoreClient:
    """Object storage primitives over one immutable S3 session."""

    def __init__(
        self,
        config: S3ClientConfig,
        transfer_config: Optional[TransferConfig] = None,
    ):
        """Initialize the client.

        Args:
            config: Connection settings for the session
            transfer_config: Managed transfer tuning; defaults to the
                multipart threshold from settings

        Raises:
            ConfigurationError: If the session cannot be established
        """
        self.client_manager = S3ClientManager(config)
        self.transfer_config = transfer_config or TransferConfig(
            multipart_threshold=settings.multipart_threshold
        )

    # Uploads
    def upload_directory(
        self,
        local_path: str,
        bucket: str,
        key_prefix: str,
        retry_count: Optional[int] = None,
    ) -> list[str]:
        """Upload a local directory tree under ``key_prefix``.

        Keys are built with ``/`` regardless of the local path separator, so
        ``root/sub/b.txt`` uploaded with prefix ``p`` lands at ``p/sub/b.txt``.

        Args:
            local_path: Directory to upload
            bucket: Target bucket
            key_prefix: Key prefix for every uploaded file; may be empty
            retry_count: Retry attempts for each upload request

        Returns:
            Keys uploaded, in traversal order

        Raises:
            LocalIOError: If a directory cannot be listed or a file cannot be
                opened. Nothing has been uploaded when this is raised during
                traversal.
            TransportError: If an upload fails; files uploaded before the
                failing one remain in the bucket.
        """
        logger.info(
            "Uploading directory",
            local_path=local_path,
            bucket=bucket,
            key_prefix=key_prefix,
        )

        with tracer.start_as_current_span("s3.upload_directory"):
            batch: list[tuple[str, str]] = []
            self._collect_directory(local_path, key_prefix, batch)

            client = self.client_manager.client(retry_count)
            for file_path, key in batch:
                try:
                    with open(file_path, "rb") as fileobj:
                        self._upload(client, fileobj, bucket, key)
                except OSError as e:
                    error_msg = f"Failed to read '{file_path}': {e}"
                    logger.error(error_msg, error=str(e))
                    raise LocalIOError(error_msg) from e

        keys = [key for _, key in batch]
        logger.info(
            "Directory uploaded",
            local_path=local_path,
            bucket=bucket,
            object_count=len(keys),
        )
        return keys

    def _collect_directory(
        self, local_path: str, key_prefix: str, batch: list[tuple[str, str]]
    ) -> None:
        """Append ``(file_path, key)`` pairs for every file below ``local_path``."""
        try:
            with os.scandir(local_path) as it:
                entries = sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            error_msg = f"Failed to list directory '{local_path}': {e}"
            logger.error(error_msg, error=str(e))
            raise LocalIOError(error_msg) from e

        for entry in entries:
            key = posixpath.join(key_prefix, entry.name)
            if entry.is_dir():
                self._collect_directory(entry.path, key, batch)
                continue

            # Anything that is not a directory must open as a file
            try:
                with open(entry.path, "rb"):
                    pass
            except OSError as e:
                error_msg = f"Failed to open '{entry.path}': {e}"
                logger.error(error_msg, error=str(e))
                raise LocalIOError(error_msg) from e

            batch.append((entry.path, key))

    def upload_fileobj(
        self,
        fileobj: IO[bytes],
        bucket: str,
        key: str,
        retry_count: Optional[int] = None,
    ) -> UploadResult:
        """Upload a readable binary stream.

        Large streams are split into a multipart upload by the transfer
        manager.

        Args:
            fileobj: Stream positioned at the first byte to upload
            bucket: Target bucket
            key: Object key
            retry_count: Retry attempts for this call only

        Raises:
            TransportError: If the upload fails
        """
        with tracer.start_as_current_span("s3.upload_object"):
            client = self.client_manager.client(retry_count)
            return self._upload(client, fileobj, bucket, key)

    def upload_object(
        self,
        bucket: str,
        key: str,
        data: bytes,
        retry_count: Optional[int] = None,
    ) -> UploadResult:
        """Upload an in-memory payload."""
        return self.upload_fileobj(io.BytesIO(data), bucket, key, retry_count)

    def _upload(self, client, fileobj: IO[bytes], bucket: str, key: str) -> UploadResult:
        size = _remaining_bytes(fileobj)
        progress = _TransferProgress()
        try:
            client.upload_fileobj(
                fileobj, bucket, key, Config=self.transfer_config, Callback=progress
            )
        except _TRANSPORT_ERRORS as e:
            error_msg = f"Failed to upload 's3://{bucket}/{key}'"
            logger.error(error_msg, error=str(e))
            raise _transport_error(error_msg, e) from e

        if size is None:
            size = progress.bytes_transferred

        logger.debug("Object uploaded", bucket=bucket, key=key, bytes_uploaded=size)
        return UploadResult(bucket=bucket, key=key, bytes_uploaded=size)

    # Downloads
    def download_object(
        self, bucket: str, key: str, retry_count: Optional[int] = None
    ) -> tuple[bytes, int]:
        """Download an object into memory.

        Only suitable for objects small enough to hold in memory.

        Returns:
            Tuple of (data, byte_count)

        Raises:
            ObjectNotFoundError: If the object does not exist
            TransportError: If the download fails
        """
        buffer = io.BytesIO()
        self.download_object_to_file(buffer, bucket, key, retry_count)
        data = buffer.getvalue()
        return data, len(data)

    def download_object_to_file(
        self,
        fileobj: IO[bytes],
        bucket: str,
        key: str,
        retry_count: Optional[int] = None,
    ) -> int:
        """Stream an object into a writable binary handle owned by the caller.

        Returns:
            Number of bytes written

        Raises:
            ObjectNotFoundError: If the object does not exist
            TransportError: If the download fails
            LocalIOError: If writing to ``fileobj`` fails
        """
        progress = _TransferProgress()

        with tracer.start_as_current_span("s3.download_object"):
            client = self.client_manager.client(retry_count)
            try:
                client.download_fileobj(
                    bucket, key, fileobj, Config=self.transfer_config, Callback=progress
                )
            except _TRANSPORT_ERRORS as e:
                error_msg = f"Failed to download 's3://{bucket}/{key}'"
                logger.error(error_msg, error=str(e))
                raise _transport_error(error_msg, e) from e
            except OSError as e:
                error_msg = f"Failed to write 's3://{bucket}/{key}' to file: {e}"
                logger.error(error_msg, error=str(e))
                raise LocalIOError(error_msg) from e

        logger.debug(
            "Object downloaded",
            bucket=bucket,
            key=key,
            bytes_downloaded=progress.bytes_transferred,
        )
        return progress.bytes_transferred

    def download_object_to_path(
        self,
        local_dir: str,
        object_name: str,
        bucket: str,
        key_prefix: str,
        retry_count: Optional[int] = None,
    ) -> int:
        """Download ``key_prefix/object_name`` to ``local_dir/object_name``.

        ``local_dir`` and its parents are created when missing and an existing
        file is truncated.

        Returns:
            Number of bytes written

        Raises:
            LocalIOError: If the directory or file cannot be created
            ObjectNotFoundError: If the object does not exist
            TransportError: If the download fails
        """
        key = posixpath.join(key_prefix, object_name)
        file_path = os.path.join(local_dir, object_name)
        logger.info(
            "Downloading object to path",
            bucket=bucket,
            key=key,
            file_path=file_path,
        )

        try:
            os.makedirs(local_dir, exist_ok=True)
            fileobj = open(file_path, "wb")
        except OSError as e:
            error_msg = f"Failed to create '{file_path}': {e}"
            logger.error(error_msg, error=str(e))
            raise LocalIOError(error_msg) from e

        with fileobj:
            return self.download_object_to_file(fileobj, bucket, key, retry_count)

    def get_object(self, bucket: str, key: str):
        """Open an object for streaming reads.

        Returns:
            The botocore ``StreamingBody``; the caller reads and closes it

        Raises:
            ObjectNotFoundError: If the object does not exist
            TransportError: If the request fails
        """
        with tracer.start_as_current_span("s3.get_object"):
            try:
                response = self.client_manager.client().get_object(
                    Bucket=bucket, Key=key
                )
            except _TRANSPORT_ERRORS as e:
                error_msg = f"Failed to get 's3://{bucket}/{key}'"
                logger.error(error_msg, error=str(e))
                raise _transport_error(error_msg, e) from e

        return response["Body"]

    # Listing
    def iter_object_pages(
        self, prefix: str, bucket: str, page_size: Optional[int] = None
    ) -> Iterator[dict[str, Any]]:
        """Yield raw ``ListObjectsV2`` pages for keys under ``prefix``.

        Pages are fetched lazily; iterate again to restart the listing.

        Raises:
            TransportError: If a page request fails
        """
        pagination_config = {"PageSize": page_size} if page_size else {}
        paginator = self.client_manager.client().get_paginator("list_objects_v2")
        page_iterator = paginator.paginate(
            Bucket=bucket, Prefix=prefix, PaginationConfig=pagination_config
        )

        try:
            for page in page_iterator:
                yield page
        except _TRANSPORT_ERRORS as e:
            error_msg = f"Failed to list 's3://{bucket}/{prefix}'"
            logger.error(error_msg, error=str(e))
            raise _transport_error(error_msg, e) from e

    def list_objects(
        self,
        prefix: str,
        bucket: str,
        page_callback: PageCallback,
        page_size: Optional[int] = None,
    ) -> None:
        """Call ``page_callback(page, last_page)`` for each page of a listing.

        Paging stops as soon as the callback returns a falsy value.

        Raises:
            TransportError: If a page request fails
        """
        logger.info("Listing objects", bucket=bucket, prefix=prefix)

        with tracer.start_as_current_span("s3.list_objects"):
            pages = self.iter_object_pages(prefix, bucket, page_size=page_size)
            try:
                for page in pages:
                    last_page = not page.get("IsTruncated", False)
                    if not page_callback(page, last_page):
                        logger.debug("Listing stopped by callback", prefix=prefix)
                        break
            finally:
                pages.close()

    # Metadata
    def object_exists(self, bucket: str, key: str) -> bool:
        """Check whether an object exists.

        Raises:
            TransportError: For any failure other than the object being absent
        """
        try:
            self.object_metadata(bucket, key)
        except ObjectNotFoundError:
            return False
        return True

    def object_metadata(self, bucket: str, key: str) -> ObjectMetadata:
        """Fetch object metadata with a HEAD request.

        Raises:
            ObjectNotFoundError: If the object does not exist
            TransportError: If the request fails
        """
        with tracer.start_as_current_span("s3.head_object"):
            try:
                response = self.client_manager.client().head_object(
                    Bucket=bucket, Key=key
                )
            except _TRANSPORT_ERRORS as e:
                error_msg = f"Failed to get metadata for 's3://{bucket}/{key}'"
                if isinstance(e, ClientError) and (
                    e.response.get("Error", {}).get("Code") in NOT_FOUND_CODES
                ):
                    logger.debug("Object not found", bucket=bucket, key=key)
                else:
                    logger.error(error_msg, error=str(e))
                raise _transport_error(error_msg, e) from e

        return ObjectMetadata(
            bucket=bucket,
            key=key,
            size_bytes=int(response.get("ContentLength", 0)),
            content_type=response.get("ContentType"),
            last_modified=response.get("LastModified"),
            etag=response.get("ETag"),
            version_id=response.get("VersionId"),
            metadata=response.get("Metadata", {}),
        )


def create_client(
    endpoint_url: Optional[str] = None,
    region_name: str = "us-east-1",
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    force_path_style: bool = False,
    disable_ssl: bool = False,
    session_token: Optional[str] = None,
) -> ObjectStoreClient:
    """Build an ``ObjectStoreClient`` from individual connection options.

    Raises:
        ConfigurationError: If the options are invalid or the session cannot
            be established
    """
    config = S3ClientManager.build_config(
        endpoint_url=endpoint_url,
        region_name=region_name,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        session_token=session_token,
        force_path_style=force_path_style,
        disable_ssl=disable_ssl,
    )
    return ObjectStoreClient(config)
