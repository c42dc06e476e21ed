from __future__ import annotations

"""Error taxonomy for CouchDB requests.

Every failure reported by the client is a ``CouchError`` subclass tagged with
an ``ErrorKind``:
- ``SerializationError``: request body could not be encoded as JSON
- ``ServiceError``: server answered with a JSON ``error``/``reason`` body
- ``StatusCodeError``: server answered with a failure status and no such body
- ``TransportError``: connection-level failure raised by ``httpx``
- ``ResponseDecodeError``: response body was not valid JSON
"""

from enum import Enum

import httpx

from .status import classify


class ErrorKind(str, Enum):
    """Discriminator shared by all client errors."""

    SERIALIZATION = "serialization"
    SERVICE = "service"
    STATUS_CODE = "status_code"
    TRANSPORT = "transport"
    RESPONSE_DECODE = "response_decode"


class CouchError(RuntimeError):
    """Base class for errors reported by ``CouchDB`` operations."""

    kind: ErrorKind

    def __init__(self, message: str, response: httpx.Response | None = None) -> None:
        """Keep the raw response (when one exists) for inspection."""

        super().__init__(message)
        self.response = response

    @property
    def status_code(self) -> int | None:
        """HTTP status of the attached response, if any."""

        if self.response is None:
            return None
        return self.response.status_code


class SerializationError(CouchError):
    """Raised when a request body cannot be converted to JSON."""

    kind = ErrorKind.SERIALIZATION


class ServiceError(CouchError):
    """Structured error body (``error``/``reason``) returned by the server."""

    kind = ErrorKind.SERVICE

    def __init__(
        self,
        error: str,
        reason: str | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        """Build the message from ``error`` and the optional ``reason``."""

        message = str(error)
        if reason:
            message = f"{message}\n{reason}"
        super().__init__(message, response)
        self.error = error
        self.reason = reason


class StatusCodeError(CouchError):
    """Failure status without a structured error body."""

    kind = ErrorKind.STATUS_CODE


class TransportError(CouchError):
    """Connection-level failure from the underlying HTTP transport."""

    kind = ErrorKind.TRANSPORT


class ResponseDecodeError(CouchError):
    """Response body that could not be parsed as JSON."""

    kind = ErrorKind.RESPONSE_DECODE


def status_code_error(code: int, response: httpx.Response | None = None) -> StatusCodeError:
    """Create a ``StatusCodeError`` whose message describes ``code``."""

    return StatusCodeError(classify(code), response)
