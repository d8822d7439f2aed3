"""Exception hierarchy for s3-tools."""

from typing import Optional


class S3ToolsError(Exception):
    """Base exception for all s3-tools errors."""

    pass


class ValidationError(S3ToolsError):
    """Raised when an argument such as an S3 path fails validation."""

    pass


class ConfigurationError(S3ToolsError):
    """Raised when the client configuration or session cannot be built."""

    pass


class LocalIOError(S3ToolsError):
    """Raised when a local directory or file cannot be listed, opened or created."""

    pass


class TransportError(S3ToolsError):
    """Raised when a call to the object store fails.

    Attributes:
        code: Service error code reported by the store, if any
    """

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class ObjectNotFoundError(TransportError):
    """Raised when the requested object does not exist."""

    pass
