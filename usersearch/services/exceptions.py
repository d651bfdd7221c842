"""Domain-specific exceptions for both sides of the search protocol."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of server-side failures.

    The value is the string that travels in the ``error`` field of a ``400``
    envelope; ``500`` kinds are sent as plain text and only use it in logs.
    """

    BAD_ORDER_FIELD = "ErrorBadOrderField"
    RANGE = "ErrorRange"
    PARAM = "ErrorParam"
    FATAL = "ErrorFatal"
    UNKNOWN = "ErrorUnknown"


# Client side


class SearchClientError(RuntimeError):
    """Base class for every failure ``SearchClient.find_users`` raises."""


class SearchValidationError(SearchClientError):
    pass


class AuthError(SearchClientError):
    pass


class SearchTimeoutError(SearchClientError):
    pass


class UnknownNetworkError(SearchClientError):
    pass


class ProtocolError(SearchClientError):
    """The server answered with a body the client cannot interpret."""


class FatalServerError(SearchClientError):
    pass


class UnknownStatusError(SearchClientError):
    def __init__(self, status_code: int) -> None:
        super().__init__(f"unknown response status {status_code}")
        self.status_code = status_code


# Server side


class SearchServerError(Exception):
    kind: ErrorKind = ErrorKind.UNKNOWN
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def wire_error(self) -> str:
        return self.kind.value


class BadOrderFieldError(SearchServerError):
    kind = ErrorKind.BAD_ORDER_FIELD
    status_code = 400

    def __init__(self, order_field: str) -> None:
        super().__init__(f"order field {order_field!r} is not sortable")
        self.order_field = order_field


class ParamError(SearchServerError):
    """A query parameter could not be parsed.

    Its message is what goes over the wire, e.g. ``"Limit convert to int"``.
    """

    kind = ErrorKind.PARAM
    status_code = 400

    @property
    def wire_error(self) -> str:
        return self.message


class RangeError(SearchServerError):
    kind = ErrorKind.RANGE
    status_code = 500


class FatalError(SearchServerError):
    """The record source could not be read or parsed."""

    kind = ErrorKind.FATAL
    status_code = 500


__all__ = [
    "AuthError",
    "BadOrderFieldError",
    "ErrorKind",
    "FatalError",
    "FatalServerError",
    "ParamError",
    "ProtocolError",
    "RangeError",
    "SearchClientError",
    "SearchServerError",
    "SearchTimeoutError",
    "SearchValidationError",
    "UnknownNetworkError",
    "UnknownStatusError",
]
