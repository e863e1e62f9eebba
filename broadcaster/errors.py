"""
Typed errors raised at the server directory boundary.

Callers branch on the class (a decode failure reads differently to a user
than a dropped connection) and show ``str(error)`` when a message is needed.
"""
from typing import Optional


class DirectoryError(Exception):
    """Base class for every failure talking to a Broadcaster server."""

    message = "Directory request failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.message)


class InvalidURLError(DirectoryError):
    """The server config cannot produce a usable endpoint URL."""

    message = "Invalid URL"

    def __init__(self, url: Optional[str] = None):
        self.url = url
        super().__init__(f"Invalid URL: {url}" if url else None)


class InvalidResponseError(DirectoryError):
    """The transport answered with something that is not an HTTP response."""

    message = "Invalid server response"


class ServerError(DirectoryError):
    """The server answered with a status other than 200."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"Server error: {status_code}")


class DecodeError(DirectoryError):
    """The payload did not match the expected shape."""

    message = "Failed to parse server response"

    def __init__(self, original: Optional[Exception] = None):
        self.original = original
        super().__init__()


class TransportError(DirectoryError):
    """Connection-level failure (refused, reset, DNS, TLS)."""

    def __init__(self, original: Optional[Exception] = None):
        self.original = original
        super().__init__(f"Network error: {original}" if original else "Network error")


class RequestTimeoutError(DirectoryError):
    """The request or the whole resource load took too long."""

    message = "Request timed out"
