"""Core utilities and shared components for s3-tools."""

from .config import settings
from .exceptions import (
    ConfigurationError,
    LocalIOError,
    ObjectNotFoundError,
    S3ToolsError,
    TransportError,
    ValidationError,
)
from .observability import get_logger, get_tracer

__all__ = [
    "settings",
    "S3ToolsError",
    "ValidationError",
    "ConfigurationError",
    "LocalIOError",
    "TransportError",
    "ObjectNotFoundError",
    "get_logger",
    "get_tracer",
]
