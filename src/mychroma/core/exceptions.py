"""Core exceptions for mychroma.

Every error raised by the Chroma and embedding clients derives from
``MyChromaError`` so callers can catch them uniformly and show a single
message to the operator.
"""

from typing import List, Optional


class MyChromaError(Exception):
    """Base exception for all mychroma operations.

    Attributes:
        message: Human-readable error message
        details: Optional additional context or metadata
    """

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class RemoteError(MyChromaError):
    """Raised when a remote HTTP API answers with an error status.

    Attributes:
        url: The request URL that failed
        status_code: HTTP status code returned by the server
        body: Raw response body
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(
            message, {"url": url, "status_code": status_code, "body": body}
        )
        self.url = url
        self.status_code = status_code
        self.body = body


class NotFoundError(MyChromaError):
    """Raised when a name cannot be resolved on the remote server.

    Attributes:
        name: The name that was requested
        available: Names that do exist, for diagnostics
    """

    def __init__(
        self, message: str, name: str, available: Optional[List[str]] = None
    ) -> None:
        super().__init__(message, {"name": name, "available": available or []})
        self.name = name
        self.available = list(available or [])


class DecodeError(MyChromaError):
    """Raised when a successful response does not carry the expected JSON."""

    def __init__(
        self, message: str, url: Optional[str] = None, body: Optional[str] = None
    ) -> None:
        super().__init__(message, {"url": url, "body": body})
        self.url = url
        self.body = body


class ConfigurationError(MyChromaError):
    """Raised when required configuration is missing or invalid."""

    pass


class ServerUnavailableError(MyChromaError):
    """Raised when the Chroma health check fails while connecting."""

    def __init__(self, base_url: str) -> None:
        super().__init__(
            f"ChromaDB server is not responding at {base_url}. "
            "Please check the server is running and the URL is correct.",
            {"base_url": base_url},
        )
        self.base_url = base_url


class TenantAccessError(MyChromaError):
    """Raised when a tenant cannot be accessed while connecting."""

    def __init__(self, tenant: str, cause: Exception) -> None:
        super().__init__(
            f"Invalid tenant '{tenant}' or unable to access it: {cause}",
            {"tenant": tenant},
        )
        self.tenant = tenant
