"""
Error types for the clocking client.

PURPOSE: One tagged error value for the UI, plus the exceptions the gateway
raises to carry it.

TAXONOMY:
- validation: Rejected locally, never reached the network (empty title,
  finishing a title that is not open, malformed date range)
- http: Server answered with a non-2xx status; message is the status code
- transport: Request never completed, or the response could not be read;
  message is the underlying error description
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

__all__ = [
    "ErrorKind",
    "ClientError",
    "GatewayError",
    "HttpFailure",
    "TransportFailure",
    "InvalidQueryError",
]


class ErrorKind(str, Enum):
    """Kind tag of a ClientError."""

    VALIDATION = "validation"
    HTTP = "http"
    TRANSPORT = "transport"


@dataclass(frozen=True)
class ClientError:
    """
    Current-error value shown to the user.

    Consumers branch on kind rather than parsing message text.

    Attributes:
        kind: Which part of the taxonomy produced the error.
        message: Short user-facing text.
        status: HTTP status code for kind == HTTP, else None.
    """

    kind: ErrorKind
    message: str
    status: int | None = None

    @classmethod
    def validation(cls, message: str) -> ClientError:
        """Local rejection that never reached the network."""
        return cls(kind=ErrorKind.VALIDATION, message=message)

    @classmethod
    def http(cls, status: int) -> ClientError:
        """Non-2xx answer; the message is the literal status code."""
        return cls(kind=ErrorKind.HTTP, message=str(status), status=status)

    @classmethod
    def transport(cls, message: str) -> ClientError:
        """Request that never completed, described by the underlying error."""
        return cls(kind=ErrorKind.TRANSPORT, message=message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        result: dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.status is not None:
            result["status"] = self.status
        return result


class GatewayError(Exception):
    """Base class for failures raised by ApiGateway."""

    def to_client_error(self) -> ClientError:
        """Convert to the ClientError shown to the user."""
        raise NotImplementedError


class HttpFailure(GatewayError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int) -> None:
        super().__init__(str(status))
        self.status = status

    def to_client_error(self) -> ClientError:
        return ClientError.http(self.status)


class TransportFailure(GatewayError):
    """The request never completed or its response was unreadable."""

    def __init__(self, description: str) -> None:
        super().__init__(description)
        self.description = description

    def to_client_error(self) -> ClientError:
        return ClientError.transport(self.description)


class InvalidQueryError(ValueError):
    """User-supplied report input that cannot be normalized."""

    def to_client_error(self) -> ClientError:
        return ClientError.validation(str(self))
