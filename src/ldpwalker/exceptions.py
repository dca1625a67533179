from http import HTTPStatus
from typing import Optional

from requests import Response


def reason_phrase(response: Response) -> str:
    """The reason phrase sent with `response`, or the standard phrase for its
    status code. Empty for unregistered codes (e.g., 599) sent without one."""
    if response.reason:
        return response.reason
    try:
        return HTTPStatus(response.status_code).phrase
    except ValueError:
        return ''


class WalkerError(Exception):
    """Base class for all errors that abort a walk."""


class ConfigError(WalkerError):
    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class TransportError(WalkerError):
    """Raised when a request fails below the HTTP layer (connection refused,
    connection reset, TLS failure, etc.)."""


class UnexpectedStatus(WalkerError):
    """Raised when a HEAD or GET request gets a response whose status is
    neither 200 OK nor 307 Temporary Redirect."""
    def __init__(self, response: Response, *args):
        super().__init__(*args)

        self.response: Response = response
        """The Requests `Response` object from the failed request."""

        self.status_code = self.response.status_code
        """The numeric HTTP status code (e.g., 404) for the failed request."""

        self.reason = reason_phrase(self.response)
        """The reason phrase (e.g., "Not Found") for the failed request."""

        self.url: Optional[str] = getattr(self.response, 'url', None)
        """The URL of the failed request."""

    def __str__(self):
        return f'{self.status_code} {self.reason}'.rstrip()


class MalformedDescription(WalkerError):
    """Raised when a binary resource does not link to exactly one description."""
    def __init__(self, url: str, descriptions: list[str]):
        super().__init__(url, descriptions)
        self.url = url
        self.descriptions = descriptions

    def __str__(self):
        return f'Wrong number of descriptions for {self.url}: {self.descriptions}'


class MalformedResponse(WalkerError):
    pass


class DepthLimitExceeded(WalkerError):
    def __init__(self, url: str, depth: int, max_depth: int):
        super().__init__(url, depth, max_depth)
        self.url = url
        self.depth = depth
        self.max_depth = max_depth

    def __str__(self):
        return f'{self.url} is at depth {self.depth}, beyond the maximum depth of {self.max_depth}'
