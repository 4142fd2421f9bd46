# api_client.py
from typing import Any, Protocol, runtime_checkable

import requests

from exceptions import (
    AuthorizationError,
    AvailabilityError,
    MissingApiKeyError,
    UnknownMethodError,
    UnparsableResponseError,
    UnrecognizedStatusError,
)
from logger import get_logger
from settings import RETURN_FORMAT, TRAKT_API_ENDPOINT, TRAKT_API_VERSION, Settings, get_settings

__all__ = [
    "RETURN_FORMAT",
    "TRAKT_API_ENDPOINT",
    "TRAKT_API_VERSION",
    "TraktClient",
    "Transport",
]

log = get_logger(__name__)

STATUS_ERRORS = {
    401: AuthorizationError,
    404: UnknownMethodError,
    503: AvailabilityError,
}


@runtime_checkable
class Transport(Protocol):
    """Anything with a requests-style get() can carry the client's requests."""

    def get(self, url: str, **kwargs: Any) -> requests.Response:
        ...


class TraktClient:
    """Minimal client for the Trakt.tv API.

    Requests are authenticated with a static API key sent in the
    ``trakt-api-key`` header. Responses are decoded from JSON into plain
    dicts (or lists of dicts) and non-200 statuses are raised as
    :mod:`exceptions` errors.
    """

    def __init__(self, client: Transport | None = None, settings: Settings | None = None):
        if client is not None and not isinstance(client, Transport):
            raise TypeError(f"client must provide get(), got {type(client).__name__}")
        self.settings = settings or get_settings()
        self.api_key = ""
        self._owns_client = client is None
        self.client = requests.Session() if client is None else client

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        """Close the HTTP session if the client created it."""
        if self._owns_client:
            self.client.close()

    def set_api_key(self, key: str) -> None:
        self.api_key = key

    def get_api_key(self) -> str:
        return self.api_key

    def get(self, method: str, params: dict | None = None) -> dict | list:
        """
        Performs a GET request against the API and returns the decoded JSON.

        Args:
            method (str): Dotted API method name, e.g. "shows.trending".
            params (dict, optional): Accepted for forward compatibility.
                Not sent with the request.

        Returns:
            dict | list: The decoded body, an object or an array of objects.

        Raises:
            MissingApiKeyError: If no API key has been set. No request is made.
            UnparsableResponseError: If the body is not valid JSON.
            AuthorizationError, UnknownMethodError, AvailabilityError:
                For 401, 404 and 503 responses.
            UnrecognizedStatusError: For any other non-200 status.
            requests.RequestException: If a network error occurs.
        """
        if not self.api_key:
            raise MissingApiKeyError("The request API key is unset.")

        if params is None:
            params = {}
        if params:
            # query strings are not built yet
            log.debug("trakt_params_ignored", method=method, params=sorted(params))

        url = self._build_url(method)
        log.debug("trakt_request", method=method, url=url)

        response = self.client.get(url, headers=self._headers())
        log.debug("trakt_response", url=url, status_code=response.status_code)

        return self._parse_response(response)

    def _build_url(self, method, fmt=None):
        fmt = fmt or self.settings.trakt_return_format
        return f"{self.settings.base_url}/{method.replace('.', '/')}.{fmt}"

    def _headers(self):
        return {
            "Content-Type": "application/json",
            "trakt-api-version": TRAKT_API_VERSION,
            "trakt-api-key": self.api_key,
        }

    def _parse_response(self, response):
        status_code = int(response.status_code)

        # The body is decoded before the status is looked at, error or not
        try:
            payload = response.json()
        except ValueError as e:
            log.warning("trakt_error", status_code=status_code, error="UnparsableResponseError")
            raise UnparsableResponseError(
                f"Unable to parse response: {response.text}",
                status_code=status_code,
                body=response.text,
            ) from e

        if status_code == 200:
            return payload

        error_class = STATUS_ERRORS.get(status_code)
        if error_class is None:
            error_class = UnrecognizedStatusError
            message = f"Unrecognized status code ({status_code}): {response.text}"
        elif isinstance(payload, dict) and "error" in payload:
            message = payload["error"]
        else:
            message = response.text

        log.warning("trakt_error", status_code=status_code, error=error_class.__name__)
        raise error_class(message, status_code=status_code, body=response.text)
