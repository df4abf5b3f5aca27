"""Error codes and exceptions raised while delivering a notification.

Every failure of a single dispatch is raised to the immediate caller. The
hierarchy separates caller configuration mistakes from network failures and
from a remote service rejecting the payload, so callers can choose what to log,
relay or ignore.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    INPUT_ERROR = "INPUT_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"  # DNS, connect, TLS
    PARSE_FAILED = "PARSE_FAILED"  # Response body could not be read
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"  # Remote returned a non-success status


class NotificationError(Exception):
    """Base class for every dispatch failure."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR


class ConfigurationError(NotificationError):
    """The caller supplied an unusable URL or timeout."""

    code = ErrorCode.INPUT_ERROR


class InvalidURLError(ConfigurationError):
    code = ErrorCode.INPUT_ERROR

    def __init__(self, url: str, reason: str):
        super().__init__(f"invalid webhook url {url!r}: {reason}")
        self.url = url
        self.reason = reason


class InvalidTimeoutError(ConfigurationError):
    code = ErrorCode.VALIDATION_FAILED

    def __init__(self, timeout: str, reason: str):
        super().__init__(f"invalid timeout {timeout!r}: {reason}")
        self.timeout = timeout
        self.reason = reason


class SerializationError(NotificationError):
    """The payload could not be encoded as JSON."""

    code = ErrorCode.INTERNAL_ERROR


class TransportError(NotificationError):
    """No HTTP response was received."""

    code = ErrorCode.NETWORK_ERROR


class DispatchTimeoutError(TransportError):
    code = ErrorCode.TIMEOUT


class BodyReadError(NotificationError):
    """A response arrived but its body could not be read."""

    code = ErrorCode.PARSE_FAILED

    def __init__(self, cause: BaseException):
        super().__init__(f"error reading body: {cause}")


class RemoteRejectionError(NotificationError):
    """The webhook answered with a status above 202.

    ``str(exc)`` is the raw response body so the remote diagnostic can be
    relayed as-is.
    """

    code = ErrorCode.EXTERNAL_SERVICE_ERROR

    def __init__(self, body: str, status_code: Optional[int] = None):
        super().__init__(body)
        self.body = body
        self.status_code = status_code

    def __str__(self) -> str:
        return self.body


__all__ = [
    "BodyReadError",
    "ConfigurationError",
    "DispatchTimeoutError",
    "ErrorCode",
    "InvalidTimeoutError",
    "InvalidURLError",
    "NotificationError",
    "RemoteRejectionError",
    "SerializationError",
    "TransportError",
]
