"""Errors raised by the Trakt API client."""


class TraktError(Exception):
    """Base exception for all client errors."""


class MissingApiKeyError(TraktError):
    """Raised when a request is attempted before an API key is set."""


class ResponseError(TraktError):
    """Base for errors derived from an API response."""

    def __init__(self, message, status_code=None, body=""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UnparsableResponseError(ResponseError):
    """Raised when the response body is not valid JSON."""


class AuthorizationError(ResponseError):
    """Raised when the API returns 401 Unauthorized."""


class UnknownMethodError(ResponseError):
    """Raised when the API returns 404 for the requested method."""


class AvailabilityError(ResponseError):
    """Raised when the API returns 503 Service Unavailable."""


class UnrecognizedStatusError(ResponseError):
    """Raised for any other non-200 HTTP response."""
