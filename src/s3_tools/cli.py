"""Command-line interface for s3-tools.

Commands:
    - upload-dir: Upload a local directory tree under a prefix
    - upload: Upload a single local file
    - download: Download an object into a local directory
    - exists: Check whether an object exists
    - info: Show object metadata
    - ls: List object keys under a prefix

Connection options are given before the command and default to the
``S3_TOOLS_*`` environment settings.
"""

import os
import posixpath
from typing import Annotated, Any, Optional

import typer

from . import __version__
from .cli_params import (
    AccessKeyOption,
    EndpointUrlOption,
    NoSSLOption,
    PathStyleOption,
    RegionOption,
    RetriesOption,
    S3PathArgument,
    SecretKeyOption,
    SessionTokenOption,
)
from .core import settings
from .objectstorage import ObjectStoreClient, S3ClientManager, create_client

app = typer.Typer(
    name="s3-tools",
    help="Upload, download and inspect objects in S3-compatible storage.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"s3-tools {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    endpoint_url: EndpointUrlOption = settings.endpoint_url,
    region_name: RegionOption = settings.region_name,
    access_key_id: AccessKeyOption = settings.access_key_id,
    secret_access_key: SecretKeyOption = settings.secret_access_key,
    session_token: SessionTokenOption = None,
    force_path_style: PathStyleOption = settings.force_path_style,
    disable_ssl: NoSSLOption = settings.disable_ssl,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    S3-Tools: object storage primitives for S3 and S3-compatible stores.
    """
    ctx.obj = {
        "endpoint_url": endpoint_url,
        "region_name": region_name,
        "access_key_id": access_key_id,
        "secret_access_key": secret_access_key,
        "session_token": session_token,
        "force_path_style": force_path_style,
        "disable_ssl": disable_ssl,
    }


def _client(ctx: typer.Context) -> ObjectStoreClient:
    options: dict[str, Any] = ctx.obj
    return create_client(**options)


def _fail(error: Exception) -> typer.Exit:
    typer.echo(f"Error: {error}", err=True)
    return typer.Exit(1)


@app.command("upload-dir")
def upload_dir_cmd(
    ctx: typer.Context,
    local_dir: Annotated[str, typer.Argument(help="Local directory to upload")],
    s3_path: S3PathArgument,
    retries: RetriesOption = None,
) -> None:
    """
    Upload a local directory recursively under a key prefix.

    Example:
        s3-tools upload-dir ./build s3://artifacts/releases/1.0
    """
    try:
        bucket, key_prefix = S3ClientManager.parse_s3_path(s3_path)
        keys = _client(ctx).upload_directory(
            local_dir, bucket, key_prefix.rstrip("/"), retry_count=retries
        )
        typer.echo(f"Uploaded {len(keys)} objects to s3://{bucket}/{key_prefix}")
    except Exception as e:
        raise _fail(e)


@app.command("upload")
def upload_cmd(
    ctx: typer.Context,
    local_file: Annotated[str, typer.Argument(help="Local file to upload")],
    s3_path: S3PathArgument,
    retries: RetriesOption = None,
) -> None:
    """
    Upload a single file. A path ending in '/' keeps the local file name.

    Example:
        s3-tools upload report.pdf s3://documents/2024/
    """
    try:
        bucket, key = S3ClientManager.parse_s3_path(s3_path)
        if not key or key.endswith("/"):
            key = posixpath.join(key, os.path.basename(local_file))

        with open(local_file, "rb") as fileobj:
            result = _client(ctx).upload_fileobj(
                fileobj, bucket, key, retry_count=retries
            )
        typer.echo(
            f"Uploaded s3://{result.bucket}/{result.key} "
            f"({result.bytes_uploaded:,} bytes)"
        )
    except Exception as e:
        raise _fail(e)


@app.command("download")
def download_cmd(
    ctx: typer.Context,
    s3_path: S3PathArgument,
    local_dir: Annotated[
        str, typer.Argument(help="Directory to download into (created if missing)")
    ] = ".",
    retries: RetriesOption = None,
) -> None:
    """
    Download an object into a local directory, keeping its file name.

    Example:
        s3-tools download s3://documents/2024/report.pdf ./downloads
    """
    try:
        bucket, key = S3ClientManager.parse_s3_path(s3_path)
        key_prefix, object_name = posixpath.split(key)
        if not object_name:
            raise ValueError(f"S3 path does not name an object: {s3_path}")

        written = _client(ctx).download_object_to_path(
            local_dir, object_name, bucket, key_prefix, retry_count=retries
        )
        typer.echo(
            f"Downloaded {os.path.join(local_dir, object_name)} ({written:,} bytes)"
        )
    except Exception as e:
        raise _fail(e)


@app.command("exists")
def exists_cmd(ctx: typer.Context, s3_path: S3PathArgument) -> None:
    """
    Check whether an object exists. Exits with status 1 when it does not.
    """
    try:
        bucket, key = S3ClientManager.parse_s3_path(s3_path)
        found = _client(ctx).object_exists(bucket, key)
    except Exception as e:
        raise _fail(e)

    if not found:
        typer.echo(f"Not found: {s3_path}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Exists: {s3_path}")


@app.command("info")
def info_cmd(ctx: typer.Context, s3_path: S3PathArgument) -> None:
    """
    Show size, content type, last-modified time and ETag of an object.
    """
    try:
        bucket, key = S3ClientManager.parse_s3_path(s3_path)
        metadata = _client(ctx).object_metadata(bucket, key)
    except Exception as e:
        raise _fail(e)

    typer.echo(f"Object: s3://{metadata.bucket}/{metadata.key}")
    typer.echo(f"Size: {metadata.size_bytes:,} bytes")
    typer.echo(f"Content type: {metadata.content_type}")
    typer.echo(f"Last modified: {metadata.last_modified}")
    typer.echo(f"ETag: {metadata.etag}")
    for name, value in sorted(metadata.metadata.items()):
        typer.echo(f"  {name}: {value}")


@app.command("ls")
def ls_cmd(
    ctx: typer.Context,
    s3_path: S3PathArgument,
    max_items: Annotated[
        int, typer.Option("--max-items", help="Maximum number of keys to print")
    ] = 1000,
) -> None:
    """
    List object keys under a prefix, in the order the store returns them.

    Example:
        s3-tools ls s3://artifacts/releases/
    """
    keys: list[str] = []

    def collect(page: dict[str, Any], last_page: bool) -> bool:
        for obj in page.get("Contents", []):
            if len(keys) >= max_items:
                return False
            keys.append(obj["Key"])
        return len(keys) < max_items

    try:
        bucket, prefix = S3ClientManager.parse_s3_path(s3_path)
        _client(ctx).list_objects(prefix, bucket, collect)
    except Exception as e:
        raise _fail(e)

    if keys:
        typer.echo(f"Found {len(keys)} objects:")
        for key in keys:
            typer.echo(f"  s3://{bucket}/{key}")
    else:
        typer.echo("No objects found.")


if __name__ == "__main__":
    app()
