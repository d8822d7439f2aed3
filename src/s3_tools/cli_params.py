"""Shared CLI parameter definitions.

Connection options are declared once here and reused by the top-level
callback; per-command options that several commands share live here too so
their names and help text stay consistent.
"""

from typing import Annotated, Optional

import typer

EndpointUrlOption = Annotated[
    Optional[str],
    typer.Option("--endpoint-url", help="Custom S3 endpoint URL (MinIO, Ceph, ...)"),
]

RegionOption = Annotated[str, typer.Option("--region", help="AWS region name")]

AccessKeyOption = Annotated[
    Optional[str], typer.Option("--access-key-id", help="AWS access key ID")
]

SecretKeyOption = Annotated[
    Optional[str], typer.Option("--secret-access-key", help="AWS secret access key")
]

SessionTokenOption = Annotated[
    Optional[str], typer.Option("--session-token", help="AWS session token")
]

PathStyleOption = Annotated[
    bool,
    typer.Option(
        "--path-style/--virtual-host-style",
        help="Use path-style bucket addressing",
    ),
]

NoSSLOption = Annotated[
    bool, typer.Option("--no-ssl/--ssl", help="Connect without TLS")
]

RetriesOption = Annotated[
    Optional[int],
    typer.Option("--retries", min=0, help="Retry attempts for each request"),
]

S3PathArgument = Annotated[
    str, typer.Argument(help="Object store location as s3://bucket/key")
]
